from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from messenger_client.api.v1.schemas.message import MessageResponse
from messenger_client.application.dto.snapshot import ConversationView
from messenger_client.domain.entities.user import User
from messenger_client.domain.value_objects.enums import ConversationType
from messenger_client.services.projections import (
    conversation_avatar,
    conversation_title,
    message_snippet,
)


class CreateConversationRequest(BaseModel):
    participant_ids: list[UUID]
    group_name: str | None = None


class CreateConversationResponse(BaseModel):
    conversation_id: UUID | None


class ConversationResponse(BaseModel):
    id: UUID
    type: ConversationType
    participants: list[UUID]
    name: str | None
    avatar: str | None
    title: str | None
    display_avatar: str | None
    last_message_snippet: str
    typing_user_ids: list[UUID]
    messages: list[MessageResponse]

    @classmethod
    def from_view(
        cls, view: ConversationView, me: UUID, users: dict[UUID, User],
    ) -> ConversationResponse:
        return cls(
            id=view.id,
            type=view.type,
            participants=sorted(view.participants, key=str),
            name=view.name,
            avatar=view.avatar,
            title=conversation_title(view.type, view.name, view.participants, me, users),
            display_avatar=conversation_avatar(
                view.type, view.avatar, view.participants, me, users,
            ),
            last_message_snippet=message_snippet(view.last_message, me),
            typing_user_ids=sorted(view.typing_user_ids, key=str),
            messages=[MessageResponse.model_validate(m, from_attributes=True) for m in view.messages],
        )
