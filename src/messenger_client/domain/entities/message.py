from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from messenger_client.domain.value_objects.enums import MessageStatus, MessageType


@dataclass(frozen=True, slots=True)
class Message:
    """A stored message. ``content`` is text or a media reference (URI / data URL)."""

    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    timestamp: datetime
    type: MessageType = MessageType.TEXT
    status: MessageStatus = MessageStatus.SENT


@dataclass(frozen=True, slots=True)
class NewMessage:
    """Row written by ``send message``; id and timestamp are assigned by the store."""

    conversation_id: UUID
    sender_id: UUID
    content: str
    type: MessageType
    status: MessageStatus = MessageStatus.SENT
