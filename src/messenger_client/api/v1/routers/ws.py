from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from messenger_client.api.v1.schemas.session import SnapshotResponse
from messenger_client.config import settings
from messenger_client.infrastructure.ws.manager import ConnectionManager
from messenger_client.infrastructure.ws.protocol import WsInbound, WsOutbound
from messenger_client.services.session_host import SessionHost

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


def snapshot_event(host: SessionHost) -> tuple[str, dict[str, Any]]:
    """Event describing the host's current state for UI connections."""
    if host.current is None:
        return "signed_out", {}
    snapshot = SnapshotResponse.from_snapshot(host.current.snapshot())
    return "snapshot", snapshot.model_dump(mode="json")


@router.websocket("/ws/session")
async def ws_session(websocket: WebSocket) -> None:
    host: SessionHost = websocket.app.state.host
    manager: ConnectionManager = websocket.app.state.ws_manager

    await manager.connect(websocket)
    heartbeat_task = asyncio.create_task(_heartbeat(websocket), name="ws-heartbeat")
    try:
        await manager.send(websocket, *snapshot_event(host))
        await _read_loop(websocket, host)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error")
    finally:
        heartbeat_task.cancel()
        manager.disconnect(websocket)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound(type="pong", data={}).model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:
        pass


async def _read_loop(ws: WebSocket, host: SessionHost) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except Exception:
            await ws.send_text(
                WsOutbound(type="error", data={"code": "invalid_payload"}).model_dump_json()
            )
            continue

        if msg.type == "ping":
            await ws.send_text(WsOutbound(type="pong", data={}).model_dump_json())

        elif msg.type == "typing":
            if host.current is not None:
                host.current.user_typing()

        else:
            await ws.send_text(
                WsOutbound(type="error", data={"code": "unknown_type", "type": msg.type}).model_dump_json()
            )
