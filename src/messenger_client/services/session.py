"""One signed-in user's session: construction, commands, snapshot, teardown."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Callable, Iterable, Self
from uuid import UUID

from messenger_client.application.dto.notice import NoticeBoard
from messenger_client.application.dto.snapshot import ConversationView, SessionSnapshot
from messenger_client.application.exceptions import LoadFailure, StoreError
from messenger_client.application.ports.media import MediaCapture
from messenger_client.application.ports.scheduler import LoopScheduler, Scheduler
from messenger_client.application.ports.store import RemoteStore
from messenger_client.domain.entities.message import Message
from messenger_client.domain.value_objects.enums import CallType, MessageType, NoticeKind
from messenger_client.services.call_session import CALL_TICK_SECONDS, CallSession
from messenger_client.services.projections import DEFAULT_AVATAR_BASE_URL
from messenger_client.services.sync_engine import ConversationSyncEngine
from messenger_client.services.typing_indicator import (
    TYPING_TIMEOUT_SECONDS,
    TypingIndicator,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class MessengerSession:
    """Owns the sync engine, typing indicator and call session of one user.

    ``open`` subscribes to the push channel before the bulk load; rows pushed
    while the load is in flight are held back and replayed once it succeeds.
    ``close`` releases the subscription and every outstanding timer.
    """

    def __init__(
        self,
        user_id: UUID,
        store: RemoteStore,
        media: MediaCapture,
        *,
        scheduler: Scheduler | None = None,
        typing_timeout: float = TYPING_TIMEOUT_SECONDS,
        call_tick_seconds: float = CALL_TICK_SECONDS,
        avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
    ) -> None:
        scheduler = scheduler or LoopScheduler()
        self.user_id = user_id
        self._store = store
        self._listeners: list[Listener] = []
        self.notices = NoticeBoard(on_change=self._notify)
        self.engine = ConversationSyncEngine(
            store, self.notices, avatar_base_url=avatar_base_url, on_change=self._notify,
        )
        self.typing = TypingIndicator(
            scheduler, timeout=typing_timeout, on_change=self._notify,
        )
        self.call = CallSession(
            scheduler, media, self.notices,
            tick_seconds=call_tick_seconds, on_change=self._notify,
        )
        self._subscription: Any = None
        self._loading = False
        self._held: list[Message] = []
        self._closed = False

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    async def open(self) -> bool:
        self._loading = True
        try:
            try:
                self._subscription = await self._store.subscribe_inserted_messages(
                    self._on_message_inserted,
                )
            except StoreError as exc:
                self.engine.fail_load(
                    LoadFailure(f"Failed to subscribe to new messages: {exc.detail}")
                )
                return False
            if self._closed:
                # closed while subscribing; close() had no handle to release
                await self._release_subscription()
                return False
            loaded = await self.engine.load(self.user_id)
        finally:
            self._loading = False

        held, self._held = self._held, []
        if self._closed:
            return False
        if loaded:
            for message in held:
                self.engine.handle_inserted_message(message)
        return loaded

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._release_subscription()
        self.typing.cancel_all()
        self.call.end()
        self._listeners.clear()
        logger.info("Session for user %s closed", self.user_id)

    async def _release_subscription(self) -> None:
        handle, self._subscription = self._subscription, None
        if handle is None:
            return
        try:
            await self._store.unsubscribe(handle)
        except StoreError as exc:
            logger.warning("Unsubscribe failed: %s", exc.detail)

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _on_message_inserted(self, message: Message) -> None:
        if self._closed:
            return
        if self._loading:
            self._held.append(message)
            return
        self.engine.handle_inserted_message(message)

    # -- commands ----------------------------------------------------------

    def select_conversation(self, conversation_id: UUID) -> bool:
        return self.engine.select_conversation(conversation_id)

    async def send_message(
        self, content: str, message_type: MessageType = MessageType.TEXT,
    ) -> bool:
        return await self.engine.send_message(content, message_type)

    async def create_conversation(
        self, participant_ids: Iterable[UUID], group_name: str | None = None,
    ) -> UUID | None:
        return await self.engine.create_conversation(participant_ids, group_name)

    def user_typing(self) -> bool:
        conversation_id = self.engine.active_conversation_id
        if conversation_id is None:
            return False
        self.typing.user_input(conversation_id, self.user_id)
        return True

    async def start_call(self, contact_id: UUID, call_type: CallType) -> bool:
        contact = self.engine.user(contact_id)
        if contact is None:
            self.notices.post(NoticeKind.INVALID_COMMAND, "Unknown contact.")
            return False
        return await self.call.start(contact, call_type)

    def end_call(self) -> None:
        self.call.end()

    def toggle_mic(self) -> None:
        self.call.toggle_mic()

    def toggle_local_video(self) -> None:
        self.call.toggle_local_video()

    def dismiss_notice(self, notice_id: int) -> bool:
        return self.notices.dismiss(notice_id)

    # -- read side ---------------------------------------------------------

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def snapshot(self) -> SessionSnapshot:
        conversations = tuple(
            ConversationView(
                id=c.id,
                type=c.type,
                participants=c.participants,
                name=c.name,
                avatar=c.avatar,
                messages=tuple(c.messages),
                typing_user_ids=self.typing.typing_user_ids(c.id),
            )
            for c in self.engine.conversations
        )
        return SessionSnapshot(
            user_id=self.user_id,
            users=tuple(self.engine.users.values()),
            conversations=conversations,
            active_conversation_id=self.engine.active_conversation_id,
            call=self.call.state,
            notices=self.notices.pending(),
            load_error=self.engine.load_error,
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session listener failed")
