from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from messenger_client.domain.entities.message import Message
from messenger_client.domain.value_objects.enums import ConversationType


@dataclass(slots=True)
class Conversation:
    """Conversation as held by the sync engine.

    ``messages`` is kept in ascending timestamp / arrival order and is only
    ever appended to.
    """

    id: UUID
    type: ConversationType
    participants: frozenset[UUID]
    name: str | None = None
    avatar: str | None = None
    messages: list[Message] = field(default_factory=list)

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None


@dataclass(frozen=True, slots=True)
class NewConversation:
    type: ConversationType
    name: str | None = None
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class ParticipantRow:
    conversation_id: UUID
    user_id: UUID
