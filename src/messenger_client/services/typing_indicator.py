"""Local typing indicator with debounced expiry."""
from __future__ import annotations

import logging
from typing import Callable
from uuid import UUID

from messenger_client.application.ports.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

TYPING_TIMEOUT_SECONDS = 3.0


class TypingIndicator:
    """Tracks who is typing per conversation.

    Each input event (re)arms a single countdown per (conversation, user);
    when it fires the user stops typing.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        timeout: float = TYPING_TIMEOUT_SECONDS,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._timeout = timeout
        self._on_change = on_change
        self._typing: dict[UUID, set[UUID]] = {}
        self._timers: dict[tuple[UUID, UUID], TimerHandle] = {}

    def user_input(self, conversation_id: UUID, user_id: UUID) -> None:
        key = (conversation_id, user_id)
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

        typing = self._typing.setdefault(conversation_id, set())
        started = user_id not in typing
        typing.add(user_id)
        self._timers[key] = self._scheduler.call_later(
            self._timeout, lambda: self._expire(conversation_id, user_id),
        )
        if started:
            self._changed()

    def is_typing(self, conversation_id: UUID, user_id: UUID) -> bool:
        return user_id in self._typing.get(conversation_id, ())

    def typing_user_ids(self, conversation_id: UUID) -> frozenset[UUID]:
        return frozenset(self._typing.get(conversation_id, ()))

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._typing.clear()

    def _expire(self, conversation_id: UUID, user_id: UUID) -> None:
        self._timers.pop((conversation_id, user_id), None)
        typing = self._typing.get(conversation_id)
        if typing is None or user_id not in typing:
            return
        typing.discard(user_id)
        if not typing:
            del self._typing[conversation_id]
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
