from __future__ import annotations

from typing import Protocol


class MediaStream(Protocol):
    def stop(self) -> None:
        """Stop every track of the stream."""
        ...


class MediaCapture(Protocol):
    async def acquire(self, *, video: bool, audio: bool) -> MediaStream:
        """Return a local capture stream or raise ``CapabilityDenied``."""
        ...
