from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from messenger_client.api.v1.schemas.conversation import ConversationResponse
from messenger_client.application.dto.notice import Notice
from messenger_client.application.dto.snapshot import SessionSnapshot
from messenger_client.domain.entities.call import CallState
from messenger_client.domain.value_objects.enums import CallType, NoticeKind
from messenger_client.services.projections import format_duration


class SignInRequest(BaseModel):
    phone_number: str


class SignUpRequest(BaseModel):
    name: str
    phone_number: str


class UserResponse(BaseModel):
    id: UUID
    name: str
    avatar: str
    phone_number: str

    model_config = {"from_attributes": True}


class NoticeResponse(BaseModel):
    id: int
    kind: NoticeKind
    message: str
    blocking: bool

    @classmethod
    def from_notice(cls, notice: Notice) -> NoticeResponse:
        return cls(
            id=notice.id,
            kind=notice.kind,
            message=notice.message,
            blocking=notice.blocking,
        )


class StartCallRequest(BaseModel):
    contact_id: UUID
    type: CallType = CallType.VOICE


class CallResponse(BaseModel):
    is_active: bool
    contact: UserResponse | None
    type: CallType | None
    is_local_video_enabled: bool
    is_mic_enabled: bool
    duration_seconds: int
    duration: str

    @classmethod
    def from_state(cls, state: CallState) -> CallResponse:
        return cls(
            is_active=state.is_active,
            contact=UserResponse.model_validate(state.contact, from_attributes=True) if state.contact else None,
            type=state.type,
            is_local_video_enabled=state.is_local_video_enabled,
            is_mic_enabled=state.is_mic_enabled,
            duration_seconds=state.duration_seconds,
            duration=format_duration(state.duration_seconds),
        )


class SnapshotResponse(BaseModel):
    user_id: UUID
    users: list[UserResponse]
    conversations: list[ConversationResponse]
    active_conversation_id: UUID | None
    call: CallResponse
    notices: list[NoticeResponse]
    load_error: str | None

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> SnapshotResponse:
        users = {u.id: u for u in snapshot.users}
        return cls(
            user_id=snapshot.user_id,
            users=[UserResponse.model_validate(u, from_attributes=True) for u in snapshot.users],
            conversations=[
                ConversationResponse.from_view(c, snapshot.user_id, users)
                for c in snapshot.conversations
            ],
            active_conversation_id=snapshot.active_conversation_id,
            call=CallResponse.from_state(snapshot.call),
            notices=[NoticeResponse.from_notice(n) for n in snapshot.notices],
            load_error=snapshot.load_error,
        )
