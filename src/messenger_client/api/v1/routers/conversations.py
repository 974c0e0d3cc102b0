from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from messenger_client.api.deps import CurrentSession
from messenger_client.api.v1.schemas.conversation import (
    ConversationResponse,
    CreateConversationRequest,
    CreateConversationResponse,
)
from messenger_client.api.v1.schemas.message import CommandResponse
from messenger_client.application.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(session: CurrentSession) -> list[ConversationResponse]:
    snapshot = session.snapshot()
    users = {u.id: u for u in snapshot.users}
    return [
        ConversationResponse.from_view(c, snapshot.user_id, users)
        for c in snapshot.conversations
    ]


@router.post("", response_model=CreateConversationResponse)
async def create_conversation(
    body: CreateConversationRequest,
    session: CurrentSession,
) -> CreateConversationResponse:
    conversation_id = await session.create_conversation(body.participant_ids, body.group_name)
    return CreateConversationResponse(conversation_id=conversation_id)


@router.post("/{conversation_id}/select", response_model=CommandResponse)
async def select_conversation(conversation_id: UUID, session: CurrentSession) -> CommandResponse:
    if not session.select_conversation(conversation_id):
        raise NotFoundError("Conversation not found")
    return CommandResponse(ok=True)


@router.post("/active/typing", response_model=CommandResponse)
async def user_typing(session: CurrentSession) -> CommandResponse:
    return CommandResponse(ok=session.user_typing())
