from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from messenger_client.domain.value_objects.enums import MessageStatus, MessageType


class SendMessageRequest(BaseModel):
    content: str = Field(min_length=1)
    type: MessageType = MessageType.TEXT


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    timestamp: datetime
    type: MessageType
    status: MessageStatus

    model_config = {"from_attributes": True}


class CommandResponse(BaseModel):
    ok: bool
