from __future__ import annotations

from fastapi import APIRouter

from messenger_client.api.deps import CurrentSession
from messenger_client.api.v1.schemas.session import CallResponse, StartCallRequest

router = APIRouter(prefix="/api/v1/call", tags=["call"])


@router.get("", response_model=CallResponse)
async def get_call(session: CurrentSession) -> CallResponse:
    return CallResponse.from_state(session.call.state)


@router.post("/start", response_model=CallResponse)
async def start_call(body: StartCallRequest, session: CurrentSession) -> CallResponse:
    await session.start_call(body.contact_id, body.type)
    return CallResponse.from_state(session.call.state)


@router.post("/end", response_model=CallResponse)
async def end_call(session: CurrentSession) -> CallResponse:
    session.end_call()
    return CallResponse.from_state(session.call.state)


@router.post("/toggle-mic", response_model=CallResponse)
async def toggle_mic(session: CurrentSession) -> CallResponse:
    session.toggle_mic()
    return CallResponse.from_state(session.call.state)


@router.post("/toggle-video", response_model=CallResponse)
async def toggle_local_video(session: CurrentSession) -> CallResponse:
    session.toggle_local_video()
    return CallResponse.from_state(session.call.state)
