"""PostgreSQL + Redis implementation of the ``RemoteStore`` port.

Rows live in PostgreSQL; every committed message insert is published on a
Redis channel, which is what ``subscribe_inserted_messages`` listens to.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable
from uuid import UUID

import redis.asyncio as aioredis
from pydantic import ValidationError as RowValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from messenger_client.application.exceptions import StoreError
from messenger_client.application.ports.store import OnMessageInserted
from messenger_client.domain.entities.conversation import (
    Conversation,
    NewConversation,
    ParticipantRow,
)
from messenger_client.domain.entities.message import Message, NewMessage
from messenger_client.domain.entities.user import NewUser, User
from messenger_client.infrastructure.bus.redis_pubsub import (
    RedisPubSubPublisher,
    RedisPubSubSubscriber,
)
from messenger_client.infrastructure.bus.serializer import (
    MESSAGE_INSERTED,
    decode_message_row,
    encode_message_inserted,
)
from messenger_client.infrastructure.db.repositories.conversation import ConversationRepo
from messenger_client.infrastructure.db.repositories.message import MessageRepo
from messenger_client.infrastructure.db.repositories.user import UserRepo

logger = logging.getLogger(__name__)


class SqlAlchemyRemoteStore:
    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        redis: aioredis.Redis,
        channel: str,
    ) -> None:
        self._sessionmaker = sessionmaker
        self._redis = redis
        self._channel = channel
        self._publisher = RedisPubSubPublisher(redis)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessionmaker() as session:
                yield session
        except (SQLAlchemyError, OSError, ValueError) as exc:
            # ValueError: a row the mappers cannot turn into an entity
            logger.warning("Store %s failed: %s", operation, exc)
            raise StoreError(f"{operation} failed: {exc.__class__.__name__}") from exc

    async def list_users(self) -> list[User]:
        async with self._session("list users") as session:
            return await UserRepo(session).list_all()

    async def list_conversations_for_user(self, user_id: UUID) -> list[Conversation]:
        async with self._session("list conversations") as session:
            return await ConversationRepo(session).list_for_user(user_id)

    async def list_messages(self, conversation_ids: Iterable[UUID]) -> list[Message]:
        async with self._session("list messages") as session:
            return await MessageRepo(session).list_for_conversations(conversation_ids)

    async def insert_message(self, row: NewMessage) -> None:
        async with self._session("insert message") as session:
            message = await MessageRepo(session).create(row)
            await session.commit()
        try:
            await self._publisher.publish(self._channel, encode_message_inserted(message))
        except aioredis.RedisError as exc:
            logger.warning("Message %s stored but not published: %s", message.id, exc)
            raise StoreError(f"publish message failed: {exc.__class__.__name__}") from exc

    async def insert_conversation(self, row: NewConversation) -> Conversation:
        async with self._session("insert conversation") as session:
            conversation = await ConversationRepo(session).create(row)
            await session.commit()
            return conversation

    async def insert_participants(self, rows: list[ParticipantRow]) -> None:
        async with self._session("insert participants") as session:
            await ConversationRepo(session).add_participants(rows)
            await session.commit()

    async def find_private_conversation(self, user_a: UUID, user_b: UUID) -> UUID | None:
        async with self._session("find private conversation") as session:
            return await ConversationRepo(session).find_private(user_a, user_b)

    async def find_user_by_phone(self, phone_number: str) -> User | None:
        async with self._session("find user") as session:
            return await UserRepo(session).get_by_phone(phone_number)

    async def insert_user(self, row: NewUser) -> User:
        async with self._session("insert user") as session:
            user = await UserRepo(session).create(row)
            await session.commit()
            return user

    async def subscribe_inserted_messages(
        self, callback: OnMessageInserted,
    ) -> RedisPubSubSubscriber:
        async def _on_event(event_type: str, data: dict[str, Any]) -> None:
            if event_type != MESSAGE_INSERTED:
                return
            try:
                message = decode_message_row(data)
            except RowValidationError:
                logger.warning("Skipping malformed message row: %r", data)
                return
            await callback(message)

        subscriber = RedisPubSubSubscriber(self._redis, self._channel, _on_event)
        try:
            await subscriber.start()
        except aioredis.RedisError as exc:
            raise StoreError(f"subscribe failed: {exc.__class__.__name__}") from exc
        return subscriber

    async def unsubscribe(self, handle: RedisPubSubSubscriber) -> None:
        await handle.stop()
