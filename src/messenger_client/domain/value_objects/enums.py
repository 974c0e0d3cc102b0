from __future__ import annotations

from enum import StrEnum


class ConversationType(StrEnum):
    PRIVATE = "private"
    GROUP = "group"


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    VOICE = "voice"


class MessageStatus(StrEnum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class CallType(StrEnum):
    VOICE = "voice"
    VIDEO = "video"


class NoticeKind(StrEnum):
    LOAD_FAILURE = "load_failure"
    WRITE_FAILURE = "write_failure"
    PARTIAL_CREATE_FAILURE = "partial_create_failure"
    CAPABILITY_DENIED = "capability_denied"
    INVALID_COMMAND = "invalid_command"
