"""Pure display helpers shared by the session snapshot and the shell."""
from __future__ import annotations

from typing import Iterable
from urllib.parse import quote
from uuid import UUID

from messenger_client.domain.entities.message import Message
from messenger_client.domain.entities.user import User
from messenger_client.domain.value_objects.enums import ConversationType, MessageType

DEFAULT_AVATAR_BASE_URL = "https://api.dicebear.com/8.x/initials/svg?seed="

_MEDIA_SNIPPETS: dict[MessageType, str] = {
    MessageType.IMAGE: "📷 Photo",
    MessageType.VIDEO: "📹 Video",
    MessageType.VOICE: "🎤 Voice Message",
}


def initials_avatar_url(name: str, base_url: str = DEFAULT_AVATAR_BASE_URL) -> str:
    """Deterministic initials identicon addressed by the URL-encoded name."""
    return f"{base_url}{quote(name, safe='')}"


def chat_partner(
    participants: Iterable[UUID],
    me: UUID,
    users: dict[UUID, User],
) -> User | None:
    for user_id in participants:
        if user_id != me:
            return users.get(user_id)
    return None


def conversation_title(
    conversation_type: ConversationType,
    name: str | None,
    participants: Iterable[UUID],
    me: UUID,
    users: dict[UUID, User],
) -> str | None:
    if conversation_type == ConversationType.GROUP:
        return name
    partner = chat_partner(participants, me, users)
    return partner.name if partner else None


def conversation_avatar(
    conversation_type: ConversationType,
    avatar: str | None,
    participants: Iterable[UUID],
    me: UUID,
    users: dict[UUID, User],
) -> str | None:
    if conversation_type == ConversationType.GROUP:
        return avatar
    partner = chat_partner(participants, me, users)
    return partner.avatar if partner else None


def message_snippet(message: Message | None, me: UUID) -> str:
    if message is None:
        return "No messages yet"
    prefix = "You: " if message.sender_id == me else ""
    return prefix + _MEDIA_SNIPPETS.get(message.type, message.content)


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"
