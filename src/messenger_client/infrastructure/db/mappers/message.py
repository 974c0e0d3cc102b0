from __future__ import annotations

from messenger_client.domain.entities.message import Message, NewMessage
from messenger_client.domain.value_objects.enums import MessageStatus, MessageType
from messenger_client.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        content=model.content,
        timestamp=model.timestamp,
        type=MessageType(model.type),
        status=MessageStatus(model.status),
    )


def new_to_model(row: NewMessage) -> MessageModel:
    return MessageModel(
        conversation_id=row.conversation_id,
        sender_id=row.sender_id,
        content=row.content,
        type=row.type.value,
        status=row.status.value,
    )
