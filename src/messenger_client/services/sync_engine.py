"""Conversation synchronization engine.

Merges three inputs into one ordered, duplicate-free conversation list:
the bulk load, the push stream of inserted message rows and local commands.
Sent messages are never inserted locally; they become visible only when the
store echoes them back on the push channel.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable
from uuid import UUID

from messenger_client.application.dto.notice import NoticeBoard
from messenger_client.application.exceptions import (
    AppError,
    LoadFailure,
    PartialCreateFailure,
    StoreError,
    ValidationError,
    WriteFailure,
)
from messenger_client.application.ports.store import RemoteStore
from messenger_client.domain.entities.conversation import (
    Conversation,
    NewConversation,
    ParticipantRow,
)
from messenger_client.domain.entities.message import Message, NewMessage
from messenger_client.domain.entities.user import User
from messenger_client.domain.value_objects.enums import (
    ConversationType,
    MessageType,
    NoticeKind,
)
from messenger_client.services.projections import (
    DEFAULT_AVATAR_BASE_URL,
    initials_avatar_url,
)

logger = logging.getLogger(__name__)


def order_by_recency(conversations: Iterable[Conversation]) -> list[Conversation]:
    """Most recent last message first; conversations without messages go last
    in their original order."""
    with_messages = [c for c in conversations if c.messages]
    without_messages = [c for c in conversations if not c.messages]
    with_messages.sort(key=lambda c: c.messages[-1].timestamp, reverse=True)
    return with_messages + without_messages


class ConversationSyncEngine:
    """Single writer of the conversation map for one signed-in user."""

    def __init__(
        self,
        store: RemoteStore,
        notices: NoticeBoard,
        *,
        avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._notices = notices
        self._avatar_base_url = avatar_base_url
        self._on_change = on_change
        self._user_id: UUID | None = None
        self._users: dict[UUID, User] = {}
        # dict order is display order
        self._conversations: dict[UUID, Conversation] = {}
        self._message_ids: set[UUID] = set()
        self.active_conversation_id: UUID | None = None
        self.load_error: str | None = None

    @property
    def user_id(self) -> UUID | None:
        return self._user_id

    @property
    def users(self) -> dict[UUID, User]:
        return dict(self._users)

    @property
    def conversations(self) -> tuple[Conversation, ...]:
        return tuple(self._conversations.values())

    def user(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    def conversation(self, conversation_id: UUID) -> Conversation | None:
        return self._conversations.get(conversation_id)

    # -- bulk load ---------------------------------------------------------

    async def load(self, user_id: UUID) -> bool:
        """Replace local state with the store's view for ``user_id``.

        All-or-nothing: on any store error the local state is emptied and a
        blocking LoadFailure notice is posted.
        """
        try:
            users = await self._store.list_users()
            conversations = await self._store.list_conversations_for_user(user_id)
            messages: list[Message] = []
            if conversations:
                messages = await self._store.list_messages([c.id for c in conversations])
        except StoreError as exc:
            self.fail_load(LoadFailure(f"Failed to load chat data: {exc.detail}"))
            return False

        by_conversation: dict[UUID, list[Message]] = {}
        for message in messages:
            by_conversation.setdefault(message.conversation_id, []).append(message)
        for conversation in conversations:
            conversation.messages = by_conversation.get(conversation.id, [])

        ordered = order_by_recency(conversations)
        self._user_id = user_id
        self._users = {u.id: u for u in users}
        self._conversations = {c.id: c for c in ordered}
        self._message_ids = {m.id for m in messages}
        self.active_conversation_id = ordered[0].id if ordered else None
        self.load_error = None

        logger.info(
            "Loaded %d conversations, %d messages for user %s",
            len(ordered), len(messages), user_id,
        )
        self._changed()
        return True

    def fail_load(self, error: AppError) -> None:
        self._user_id = None
        self._users = {}
        self._conversations = {}
        self._message_ids = set()
        self.active_conversation_id = None
        self.load_error = error.detail
        logger.warning("Bulk load failed: %s", error.detail)
        self._notices.post(NoticeKind.LOAD_FAILURE, error.detail, blocking=True)

    # -- push stream -------------------------------------------------------

    def handle_inserted_message(self, message: Message) -> bool:
        """Apply one push-delivered message row. Returns True if state changed."""
        conversation = self._conversations.get(message.conversation_id)
        if conversation is None:
            logger.debug(
                "Dropping message %s for unknown conversation %s",
                message.id, message.conversation_id,
            )
            return False
        if message.id in self._message_ids:
            logger.debug("Duplicate push for message %s ignored", message.id)
            return False

        conversation.messages.append(message)
        self._message_ids.add(message.id)
        self._move_to_front(conversation)
        self._changed()
        return True

    # -- commands ----------------------------------------------------------

    def select_conversation(self, conversation_id: UUID) -> bool:
        if conversation_id not in self._conversations:
            return False
        if self.active_conversation_id != conversation_id:
            self.active_conversation_id = conversation_id
            self._changed()
        return True

    async def send_message(
        self,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        conversation_id: UUID | None = None,
    ) -> bool:
        """Write a message row. Local state is left to the push round-trip."""
        target = conversation_id or self.active_conversation_id
        if target is None or self._user_id is None:
            self._reject(ValidationError("No active conversation to send to."))
            return False
        if message_type == MessageType.TEXT:
            content = content.strip()
        if not content:
            self._reject(ValidationError("Cannot send an empty message."))
            return False

        row = NewMessage(
            conversation_id=target,
            sender_id=self._user_id,
            content=content,
            type=message_type,
        )
        try:
            await self._store.insert_message(row)
        except StoreError as exc:
            error = WriteFailure(f"Failed to send message: {exc.detail}")
            logger.warning("%s (conversation %s)", error.detail, target)
            self._notices.post(NoticeKind.WRITE_FAILURE, error.detail)
            return False
        return True

    async def create_conversation(
        self,
        participant_ids: Iterable[UUID],
        group_name: str | None = None,
    ) -> UUID | None:
        """Create (or reuse) a conversation and make it active.

        Two members without a name reuse the store's existing private
        conversation for that pair when there is one.
        """
        if self._user_id is None:
            self._reject(ValidationError("Sign in before creating a conversation."))
            return None
        group_name = (group_name or "").strip() or None
        members = list(dict.fromkeys([self._user_id, *participant_ids]))
        if len(members) < 2:
            self._reject(ValidationError("Cannot create a conversation with yourself."))
            return None

        # private means exactly two members and no name, so a named pair is a group
        is_group = len(members) > 2 or group_name is not None
        try:
            if not is_group:
                existing = await self._store.find_private_conversation(members[0], members[1])
                if existing is not None:
                    logger.debug("Reusing private conversation %s", existing)
                    self.active_conversation_id = existing
                    self._changed()
                    return existing

            if is_group and group_name is None:
                group_name = self._default_group_name(members)
            created = await self._store.insert_conversation(
                NewConversation(
                    type=ConversationType.GROUP if is_group else ConversationType.PRIVATE,
                    name=group_name,
                    avatar=initials_avatar_url(group_name, self._avatar_base_url) if group_name else None,
                )
            )
        except StoreError as exc:
            error = WriteFailure(f"Failed to create conversation: {exc.detail}")
            logger.warning(error.detail)
            self._notices.post(NoticeKind.WRITE_FAILURE, error.detail)
            return None

        try:
            await self._store.insert_participants(
                [ParticipantRow(conversation_id=created.id, user_id=uid) for uid in members]
            )
        except StoreError as exc:
            # The conversation row stays behind in the store; no rollback.
            partial = PartialCreateFailure(
                f"Failed to create conversation: {exc.detail}",
                conversation_id=created.id,
            )
            logger.warning("%s (orphaned conversation %s)", partial.detail, created.id)
            self._notices.post(NoticeKind.PARTIAL_CREATE_FAILURE, partial.detail)
            return None

        conversation = Conversation(
            id=created.id,
            type=created.type,
            participants=frozenset(members),
            name=created.name,
            avatar=created.avatar,
            messages=[],
        )
        self._move_to_front(conversation)
        self.active_conversation_id = conversation.id
        logger.info("Created %s conversation %s", conversation.type, conversation.id)
        self._changed()
        return conversation.id

    # -- internals ---------------------------------------------------------

    def _default_group_name(self, members: list[UUID]) -> str:
        names = [
            self._users[uid].name if uid in self._users else str(uid)
            for uid in members
            if uid != self._user_id
        ]
        return ", ".join(names)

    def _move_to_front(self, conversation: Conversation) -> None:
        self._conversations.pop(conversation.id, None)
        self._conversations = {conversation.id: conversation, **self._conversations}

    def _reject(self, error: AppError) -> None:
        logger.info("Command rejected: %s", error.detail)
        self._notices.post(NoticeKind.INVALID_COMMAND, error.detail)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
