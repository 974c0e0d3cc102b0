"""Voice / video call session state machine (idle -> active -> idle)."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from messenger_client.application.dto.notice import NoticeBoard
from messenger_client.application.exceptions import CapabilityDenied
from messenger_client.application.ports.media import MediaCapture, MediaStream
from messenger_client.application.ports.scheduler import Scheduler, TimerHandle
from messenger_client.domain.entities.call import IDLE_CALL_STATE, CallState
from messenger_client.domain.entities.user import User
from messenger_client.domain.value_objects.enums import CallType, NoticeKind

logger = logging.getLogger(__name__)

CALL_TICK_SECONDS = 1.0


class CallSession:
    """At most one active call. Capture failure degrades, it never ends the call."""

    def __init__(
        self,
        scheduler: Scheduler,
        media: MediaCapture,
        notices: NoticeBoard,
        *,
        tick_seconds: float = CALL_TICK_SECONDS,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._media = media
        self._notices = notices
        self._tick_seconds = tick_seconds
        self._on_change = on_change
        self._state: CallState = IDLE_CALL_STATE
        self._tick_handle: TimerHandle | None = None
        self._stream: MediaStream | None = None
        # bumped on every start/end so a late capture result can tell it is stale
        self._generation = 0

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def has_capture(self) -> bool:
        return self._stream is not None

    async def start(self, contact: User, call_type: CallType) -> bool:
        if self._state.is_active:
            logger.warning(
                "Call with %s already active, ignoring start for %s",
                self._state.contact.id if self._state.contact else None, contact.id,
            )
            return False

        self._generation += 1
        generation = self._generation
        self._state = CallState(is_active=True, contact=contact, type=call_type)
        self._schedule_tick()
        logger.info("Started %s call with %s", call_type, contact.id)
        self._changed()

        if call_type == CallType.VIDEO:
            await self._acquire_capture(generation)
        return True

    def toggle_mic(self) -> None:
        if not self._state.is_active:
            return
        self._state = replace(self._state, is_mic_enabled=not self._state.is_mic_enabled)
        self._changed()

    def toggle_local_video(self) -> None:
        if not self._state.is_active:
            return
        self._state = replace(
            self._state, is_local_video_enabled=not self._state.is_local_video_enabled,
        )
        self._changed()

    def end(self) -> None:
        if not self._state.is_active:
            return
        self._generation += 1
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        self._release_capture()
        duration = self._state.duration_seconds
        self._state = IDLE_CALL_STATE
        logger.info("Call ended after %ds", duration)
        self._changed()

    async def _acquire_capture(self, generation: int) -> None:
        try:
            stream = await self._media.acquire(video=True, audio=True)
        except CapabilityDenied as exc:
            logger.warning("Media capture denied: %s", exc.detail)
            self._notices.post(
                NoticeKind.CAPABILITY_DENIED,
                "Could not access camera or microphone. Please check permissions.",
            )
            return
        if generation != self._generation:
            # the call ended or was restarted while we were waiting
            stream.stop()
            return
        self._stream = stream

    def _release_capture(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None

    def _schedule_tick(self) -> None:
        self._tick_handle = self._scheduler.call_later(self._tick_seconds, self._tick)

    def _tick(self) -> None:
        if not self._state.is_active:
            return
        self._state = replace(self._state, duration_seconds=self._state.duration_seconds + 1)
        self._schedule_tick()
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
