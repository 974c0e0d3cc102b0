from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable

from messenger_client.domain.value_objects.enums import NoticeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Notice:
    """User-visible message produced at an operation boundary."""

    id: int
    kind: NoticeKind
    message: str
    blocking: bool = False


class NoticeBoard:
    """Pending notices, oldest first. Blocking notices cannot be dismissed."""

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        self._notices: dict[int, Notice] = {}
        self._ids = itertools.count(1)
        self._on_change = on_change

    def post(self, kind: NoticeKind, message: str, *, blocking: bool = False) -> Notice:
        notice = Notice(id=next(self._ids), kind=kind, message=message, blocking=blocking)
        self._notices[notice.id] = notice
        logger.info("Notice %d (%s): %s", notice.id, kind, message)
        self._changed()
        return notice

    def dismiss(self, notice_id: int) -> bool:
        notice = self._notices.get(notice_id)
        if notice is None or notice.blocking:
            return False
        del self._notices[notice_id]
        self._changed()
        return True

    def pending(self) -> tuple[Notice, ...]:
        return tuple(self._notices.values())

    def clear(self) -> None:
        self._notices.clear()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
