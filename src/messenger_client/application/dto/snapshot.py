from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from messenger_client.application.dto.notice import Notice
from messenger_client.domain.entities.call import CallState
from messenger_client.domain.entities.message import Message
from messenger_client.domain.entities.user import User
from messenger_client.domain.value_objects.enums import ConversationType


@dataclass(frozen=True, slots=True)
class ConversationView:
    """Read-only projection of a conversation handed to the presentation layer."""

    id: UUID
    type: ConversationType
    participants: frozenset[UUID]
    name: str | None
    avatar: str | None
    messages: tuple[Message, ...]
    typing_user_ids: frozenset[UUID]

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    user_id: UUID
    users: tuple[User, ...]
    conversations: tuple[ConversationView, ...]
    active_conversation_id: UUID | None
    call: CallState
    notices: tuple[Notice, ...]
    load_error: str | None = None
