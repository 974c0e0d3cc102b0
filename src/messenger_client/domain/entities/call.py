from __future__ import annotations

from dataclasses import dataclass

from messenger_client.domain.entities.user import User
from messenger_client.domain.value_objects.enums import CallType


@dataclass(frozen=True, slots=True)
class CallState:
    is_active: bool = False
    contact: User | None = None
    type: CallType | None = None
    is_local_video_enabled: bool = True
    is_mic_enabled: bool = True
    duration_seconds: int = 0


IDLE_CALL_STATE = CallState()
