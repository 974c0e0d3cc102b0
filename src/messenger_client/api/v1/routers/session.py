from __future__ import annotations

from fastapi import APIRouter, Response

from messenger_client.api.deps import CurrentSession, HostDep
from messenger_client.api.v1.schemas.session import (
    SignInRequest,
    SignUpRequest,
    SnapshotResponse,
)

router = APIRouter(prefix="/api/v1/session", tags=["session"])


@router.get("", response_model=SnapshotResponse)
async def get_session(session: CurrentSession) -> SnapshotResponse:
    return SnapshotResponse.from_snapshot(session.snapshot())


@router.post("/sign-in", response_model=SnapshotResponse)
async def sign_in(body: SignInRequest, host: HostDep) -> SnapshotResponse:
    session = await host.sign_in(body.phone_number)
    return SnapshotResponse.from_snapshot(session.snapshot())


@router.post("/sign-up", response_model=SnapshotResponse, status_code=201)
async def sign_up(body: SignUpRequest, host: HostDep) -> SnapshotResponse:
    session = await host.sign_up(body.name, body.phone_number)
    return SnapshotResponse.from_snapshot(session.snapshot())


@router.post("/logout", status_code=204)
async def logout(host: HostDep) -> Response:
    await host.logout()
    return Response(status_code=204)
