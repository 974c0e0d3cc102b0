"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Iterator
from uuid import UUID

import pytest

from messenger_client.application.exceptions import CapabilityDenied, StoreError
from messenger_client.application.ports.store import OnMessageInserted
from messenger_client.domain.entities.conversation import (
    Conversation,
    NewConversation,
    ParticipantRow,
)
from messenger_client.domain.entities.message import Message, NewMessage
from messenger_client.domain.entities.user import NewUser, User
from messenger_client.domain.value_objects.enums import (
    ConversationType,
    MessageStatus,
    MessageType,
)
from messenger_client.services.session import MessengerSession

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return EPOCH + timedelta(seconds=seconds)


def make_user(name: str = "Alice", phone_number: str | None = None) -> User:
    return User(
        id=uuid.uuid4(),
        name=name,
        avatar=f"https://avatars.test/{name}",
        phone_number=phone_number or f"+1{uuid.uuid4().int % 10**10:010d}",
    )


def make_message(
    conversation_id: UUID,
    sender_id: UUID,
    *,
    ts: float = 0,
    content: str = "hello",
    message_type: MessageType = MessageType.TEXT,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        timestamp=at(ts),
        type=message_type,
        status=MessageStatus.SENT,
    )


@dataclass
class _ConversationRecord:
    id: UUID
    type: ConversationType
    name: str | None = None
    avatar: str | None = None


@dataclass
class FakeRemoteStore:
    """In-memory store. ``fail_on`` holds operation names that raise StoreError.

    With ``echo_inserts`` every inserted message is pushed to subscribers,
    the way the real store's push channel behaves.
    ``subscribe_gate`` holds subscribe calls until the event is set.
    """

    users: list[User] = field(default_factory=list)
    conversations: list[_ConversationRecord] = field(default_factory=list)
    participants: list[ParticipantRow] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    inserted_messages: list[NewMessage] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    echo_inserts: bool = False
    subscribe_gate: asyncio.Event | None = None
    calls: list[str] = field(default_factory=list)
    subscribers: dict[int, OnMessageInserted] = field(default_factory=dict)
    _handles: Iterator[int] = field(default_factory=lambda: itertools.count(1))
    _clock: Iterator[int] = field(default_factory=lambda: itertools.count(1000))

    # -- test helpers --------------------------------------------------------

    def add_user(self, name: str = "Alice", phone_number: str | None = None) -> User:
        user = make_user(name, phone_number)
        self.users.append(user)
        return user

    def add_conversation(
        self,
        members: Iterable[UUID],
        *,
        name: str | None = None,
        avatar: str | None = None,
    ) -> UUID:
        members = list(members)
        record = _ConversationRecord(
            id=uuid.uuid4(),
            type=ConversationType.GROUP if len(members) > 2 or name else ConversationType.PRIVATE,
            name=name,
            avatar=avatar,
        )
        self.conversations.append(record)
        self.participants.extend(ParticipantRow(record.id, uid) for uid in members)
        return record.id

    def add_message(self, conversation_id: UUID, sender_id: UUID, *, ts: float, content: str = "hi") -> Message:
        message = make_message(conversation_id, sender_id, ts=ts, content=content)
        self.messages.append(message)
        return message

    async def push(self, message: Message) -> None:
        for callback in list(self.subscribers.values()):
            await callback(message)

    def members_of(self, conversation_id: UUID) -> set[UUID]:
        return {p.user_id for p in self.participants if p.conversation_id == conversation_id}

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise StoreError(f"{operation} failed")

    # -- RemoteStore ---------------------------------------------------------

    async def list_users(self) -> list[User]:
        self._check("list_users")
        return list(self.users)

    async def list_conversations_for_user(self, user_id: UUID) -> list[Conversation]:
        self._check("list_conversations_for_user")
        return [
            Conversation(
                id=r.id,
                type=r.type,
                participants=frozenset(self.members_of(r.id)),
                name=r.name,
                avatar=r.avatar,
            )
            for r in self.conversations
            if user_id in self.members_of(r.id)
        ]

    async def list_messages(self, conversation_ids: Iterable[UUID]) -> list[Message]:
        self._check("list_messages")
        ids = set(conversation_ids)
        return sorted(
            (m for m in self.messages if m.conversation_id in ids),
            key=lambda m: m.timestamp,
        )

    async def insert_message(self, row: NewMessage) -> None:
        self._check("insert_message")
        self.inserted_messages.append(row)
        message = Message(
            id=uuid.uuid4(),
            conversation_id=row.conversation_id,
            sender_id=row.sender_id,
            content=row.content,
            timestamp=at(next(self._clock)),
            type=row.type,
            status=row.status,
        )
        self.messages.append(message)
        if self.echo_inserts:
            await self.push(message)

    async def insert_conversation(self, row: NewConversation) -> Conversation:
        self._check("insert_conversation")
        record = _ConversationRecord(id=uuid.uuid4(), type=row.type, name=row.name, avatar=row.avatar)
        self.conversations.append(record)
        return Conversation(
            id=record.id,
            type=record.type,
            participants=frozenset(),
            name=record.name,
            avatar=record.avatar,
        )

    async def insert_participants(self, rows: list[ParticipantRow]) -> None:
        self._check("insert_participants")
        self.participants.extend(rows)

    async def find_private_conversation(self, user_a: UUID, user_b: UUID) -> UUID | None:
        self._check("find_private_conversation")
        for r in self.conversations:
            if r.type == ConversationType.PRIVATE and self.members_of(r.id) == {user_a, user_b}:
                return r.id
        return None

    async def find_user_by_phone(self, phone_number: str) -> User | None:
        self._check("find_user_by_phone")
        return next((u for u in self.users if u.phone_number == phone_number), None)

    async def insert_user(self, row: NewUser) -> User:
        self._check("insert_user")
        user = User(id=uuid.uuid4(), name=row.name, avatar=row.avatar, phone_number=row.phone_number)
        self.users.append(user)
        return user

    async def subscribe_inserted_messages(self, callback: OnMessageInserted) -> int:
        self._check("subscribe_inserted_messages")
        if self.subscribe_gate is not None:
            await self.subscribe_gate.wait()
        handle = next(self._handles)
        self.subscribers[handle] = callback
        return handle

    async def unsubscribe(self, handle: int) -> None:
        self._check("unsubscribe")
        self.subscribers.pop(handle, None)


class FakeTimer:
    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock: timers fire only inside ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target


class FakeStream:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


@dataclass
class FakeMediaCapture:
    deny: bool = False
    gate: asyncio.Event | None = None
    streams: list[FakeStream] = field(default_factory=list)

    async def acquire(self, *, video: bool, audio: bool) -> FakeStream:
        if self.gate is not None:
            await self.gate.wait()
        if self.deny:
            raise CapabilityDenied("Permission denied")
        stream = FakeStream()
        self.streams.append(stream)
        return stream


@dataclass
class FakeSessionSlot:
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def clear(self, key: str) -> None:
        self.values.pop(key, None)


@pytest.fixture
def store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def media() -> FakeMediaCapture:
    return FakeMediaCapture()


@pytest.fixture
def me(store: FakeRemoteStore) -> User:
    return store.add_user("Me", "+10000000000")


@pytest.fixture
def session_factory(store, media, scheduler) -> Callable[[UUID], MessengerSession]:
    def _factory(user_id: UUID) -> MessengerSession:
        return MessengerSession(user_id, store, media, scheduler=scheduler)

    return _factory
