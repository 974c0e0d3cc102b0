from __future__ import annotations

from typing import Protocol


class SessionSlot(Protocol):
    """Durable key-value slot that survives process restarts."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self, key: str) -> None: ...
