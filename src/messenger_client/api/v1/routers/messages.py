from __future__ import annotations

from fastapi import APIRouter

from messenger_client.api.deps import CurrentSession
from messenger_client.api.v1.schemas.message import CommandResponse, SendMessageRequest

router = APIRouter(prefix="/api/v1/conversations/active/messages", tags=["messages"])


@router.post("", response_model=CommandResponse, status_code=202)
async def send_message(body: SendMessageRequest, session: CurrentSession) -> CommandResponse:
    # The message shows up in the snapshot once the store pushes it back.
    return CommandResponse(ok=await session.send_message(body.content, body.type))
