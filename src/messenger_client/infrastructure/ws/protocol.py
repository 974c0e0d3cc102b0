"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsInbound(BaseModel):
    """UI -> shell."""

    type: str  # ping | typing
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Shell -> UI."""

    type: str  # snapshot | signed_out | error | pong
    data: dict[str, Any] = {}
