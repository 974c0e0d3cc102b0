"""Process-level holder of the current session and the persisted user id."""
from __future__ import annotations

import logging
from typing import Callable
from uuid import UUID

from messenger_client.application.exceptions import UnauthorizedError
from messenger_client.application.ports.session_slot import SessionSlot
from messenger_client.application.ports.store import RemoteStore
from messenger_client.services import auth_service
from messenger_client.services.projections import DEFAULT_AVATAR_BASE_URL
from messenger_client.services.session import Listener, MessengerSession

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "messenger-user-id"

SessionFactory = Callable[[UUID], MessengerSession]


class SessionHost:
    def __init__(
        self,
        store: RemoteStore,
        slot: SessionSlot,
        session_factory: SessionFactory,
        *,
        user_key: str = SESSION_USER_KEY,
        avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
    ) -> None:
        self._store = store
        self._slot = slot
        self._factory = session_factory
        self._user_key = user_key
        self._avatar_base_url = avatar_base_url
        self._listeners: list[Listener] = []
        self.current: MessengerSession | None = None

    def require_session(self) -> MessengerSession:
        if self.current is None:
            raise UnauthorizedError("Not signed in")
        return self.current

    async def restore(self) -> MessengerSession | None:
        """Reopen the session of the user remembered in the slot, if any."""
        raw = self._slot.get(self._user_key)
        if not raw:
            return None
        try:
            user_id = UUID(raw)
        except ValueError:
            logger.warning("Discarding malformed persisted user id %r", raw)
            self._slot.clear(self._user_key)
            return None
        return await self._open(user_id)

    async def sign_in(self, phone_number: str) -> MessengerSession:
        user = await auth_service.sign_in(phone_number, self._store)
        return await self._login(user.id)

    async def sign_up(self, name: str, phone_number: str) -> MessengerSession:
        user = await auth_service.sign_up(
            name, phone_number, self._store, avatar_base_url=self._avatar_base_url,
        )
        return await self._login(user.id)

    async def logout(self) -> None:
        self._slot.clear(self._user_key)
        await self.close()
        self._notify()

    async def close(self) -> None:
        """Close the current session but keep the persisted user id."""
        if self.current is not None:
            await self.current.close()
            self.current = None

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def _login(self, user_id: UUID) -> MessengerSession:
        self._slot.set(self._user_key, str(user_id))
        return await self._open(user_id)

    async def _open(self, user_id: UUID) -> MessengerSession:
        await self.close()
        session = self._factory(user_id)
        session.add_listener(self._notify)
        self.current = session
        await session.open()
        logger.info("Session opened for user %s", user_id)
        self._notify()
        return session

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session host listener failed")
