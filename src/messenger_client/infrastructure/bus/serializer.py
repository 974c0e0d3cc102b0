from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from messenger_client.domain.entities.message import Message
from messenger_client.domain.value_objects.enums import MessageStatus, MessageType

MESSAGE_INSERTED = "message.inserted"


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    envelope = {"event": event_type, "data": payload}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    data = json.loads(raw)
    return data["event"], data["data"]


class MessageRow(BaseModel):
    """Inserted message row as it travels on the push channel.

    Accepts both the store's snake_case columns and camelCase keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    timestamp: datetime
    type: MessageType = MessageType.TEXT
    status: MessageStatus = MessageStatus.SENT

    @classmethod
    def from_entity(cls, message: Message) -> MessageRow:
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender_id=message.sender_id,
            content=message.content,
            timestamp=message.timestamp,
            type=message.type,
            status=message.status,
        )

    def to_entity(self) -> Message:
        return Message(
            id=self.id,
            conversation_id=self.conversation_id,
            sender_id=self.sender_id,
            content=self.content,
            timestamp=self.timestamp,
            type=self.type,
            status=self.status,
        )


def encode_message_inserted(message: Message) -> str:
    return serialize_event(MESSAGE_INSERTED, MessageRow.from_entity(message).model_dump())


def decode_message_row(data: dict[str, Any]) -> Message:
    """Normalize a pushed row into a ``Message``. Raises pydantic.ValidationError."""
    return MessageRow.model_validate(data).to_entity()
