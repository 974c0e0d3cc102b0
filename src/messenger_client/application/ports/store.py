from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, Protocol
from uuid import UUID

from messenger_client.domain.entities.conversation import (
    Conversation,
    NewConversation,
    ParticipantRow,
)
from messenger_client.domain.entities.message import Message, NewMessage
from messenger_client.domain.entities.user import NewUser, User

OnMessageInserted = Callable[[Message], Awaitable[None]]


class RemoteStore(Protocol):
    """Remote relational store plus its insert push channel.

    Every failure surfaces as ``StoreError``.
    """

    async def list_users(self) -> list[User]: ...

    async def list_conversations_for_user(self, user_id: UUID) -> list[Conversation]:
        """Conversations the user participates in, participants embedded, no messages."""
        ...

    async def list_messages(self, conversation_ids: Iterable[UUID]) -> list[Message]:
        """Messages of the given conversations ordered by timestamp ascending."""
        ...

    async def insert_message(self, row: NewMessage) -> None: ...

    async def insert_conversation(self, row: NewConversation) -> Conversation: ...

    async def insert_participants(self, rows: list[ParticipantRow]) -> None: ...

    async def find_private_conversation(self, user_a: UUID, user_b: UUID) -> UUID | None: ...

    async def find_user_by_phone(self, phone_number: str) -> User | None: ...

    async def insert_user(self, row: NewUser) -> User: ...

    async def subscribe_inserted_messages(self, callback: OnMessageInserted) -> Any: ...

    async def unsubscribe(self, handle: Any) -> None: ...
