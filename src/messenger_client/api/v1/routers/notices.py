from __future__ import annotations

from fastapi import APIRouter, Response

from messenger_client.api.deps import CurrentSession
from messenger_client.api.v1.schemas.session import NoticeResponse
from messenger_client.application.exceptions import NotFoundError

router = APIRouter(prefix="/api/v1/notices", tags=["notices"])


@router.get("", response_model=list[NoticeResponse])
async def list_notices(session: CurrentSession) -> list[NoticeResponse]:
    return [NoticeResponse.from_notice(n) for n in session.notices.pending()]


@router.delete("/{notice_id}", status_code=204)
async def dismiss_notice(notice_id: int, session: CurrentSession) -> Response:
    if not session.dismiss_notice(notice_id):
        raise NotFoundError("Notice not found or not dismissable")
    return Response(status_code=204)
