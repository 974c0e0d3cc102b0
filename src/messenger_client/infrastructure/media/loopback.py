"""Local-only media capture.

No real device or peer connection is involved: the "remote" feed of a call
is the local stream looped back.
"""
from __future__ import annotations

import logging
import uuid

from messenger_client.application.exceptions import CapabilityDenied

logger = logging.getLogger(__name__)


class LoopbackStream:
    def __init__(self, *, video: bool, audio: bool) -> None:
        self.id = uuid.uuid4().hex[:8]
        self.video = video
        self.audio = audio
        self.active = True

    def stop(self) -> None:
        if self.active:
            self.active = False
            logger.debug("Capture stream %s stopped", self.id)


class LoopbackMediaCapture:
    def __init__(self, *, allow_video: bool = True, allow_audio: bool = True) -> None:
        self._allow_video = allow_video
        self._allow_audio = allow_audio

    async def acquire(self, *, video: bool, audio: bool) -> LoopbackStream:
        if (video and not self._allow_video) or (audio and not self._allow_audio):
            raise CapabilityDenied("Camera or microphone access is disabled")
        stream = LoopbackStream(video=video, audio=audio)
        logger.debug("Capture stream %s acquired (video=%s audio=%s)", stream.id, video, audio)
        return stream
