from __future__ import annotations

import uuid

import pytest

from messenger_client.application.dto.notice import NoticeBoard
from messenger_client.domain.entities.conversation import Conversation
from messenger_client.domain.value_objects.enums import (
    ConversationType,
    MessageStatus,
    MessageType,
    NoticeKind,
)
from messenger_client.services.sync_engine import ConversationSyncEngine, order_by_recency
from tests.conftest import make_message


@pytest.fixture
def notices() -> NoticeBoard:
    return NoticeBoard()


@pytest.fixture
def engine(store, notices) -> ConversationSyncEngine:
    return ConversationSyncEngine(store, notices)


def _ids(engine: ConversationSyncEngine) -> list[uuid.UUID]:
    return [c.id for c in engine.conversations]


@pytest.mark.asyncio
async def test_load_orders_by_last_message_and_selects_top(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    a = store.add_conversation([me.id, bob.id])
    b = store.add_conversation([me.id, carol.id])
    store.add_message(a, bob.id, ts=10)
    store.add_message(b, carol.id, ts=20)

    assert await engine.load(me.id) is True

    assert _ids(engine) == [b, a]
    assert engine.active_conversation_id == b
    assert engine.load_error is None


@pytest.mark.asyncio
async def test_load_puts_empty_conversations_last_in_fetch_order(store, engine, me):
    others = [store.add_user(f"U{i}") for i in range(4)]
    empty_1 = store.add_conversation([me.id, others[0].id])
    busy_old = store.add_conversation([me.id, others[1].id])
    empty_2 = store.add_conversation([me.id, others[2].id])
    busy_new = store.add_conversation([me.id, others[3].id])
    store.add_message(busy_old, me.id, ts=5)
    store.add_message(busy_new, me.id, ts=1)
    store.add_message(busy_new, others[3].id, ts=50)

    await engine.load(me.id)

    assert _ids(engine) == [busy_new, busy_old, empty_1, empty_2]
    last_times = [c.last_message.timestamp for c in engine.conversations if c.last_message]
    assert last_times == sorted(last_times, reverse=True)


@pytest.mark.asyncio
async def test_load_groups_messages_in_timestamp_order(store, engine, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    late = store.add_message(conv, bob.id, ts=30)
    early = store.add_message(conv, me.id, ts=10)

    await engine.load(me.id)

    assert engine.conversation(conv).messages == [early, late]


@pytest.mark.asyncio
async def test_load_without_conversations_skips_message_fetch(store, engine, me):
    assert await engine.load(me.id) is True

    assert engine.conversations == ()
    assert engine.active_conversation_id is None
    assert "list_messages" not in store.calls
    assert engine.users[me.id] == me


@pytest.mark.asyncio
async def test_load_failure_discards_everything(store, engine, notices, me):
    bob = store.add_user("Bob")
    store.add_conversation([me.id, bob.id])
    store.fail_on.add("list_messages")

    assert await engine.load(me.id) is False

    assert engine.conversations == ()
    assert engine.users == {}
    assert engine.active_conversation_id is None
    assert engine.load_error is not None
    assert "list_messages failed" in engine.load_error
    [notice] = notices.pending()
    assert notice.kind == NoticeKind.LOAD_FAILURE
    assert notice.blocking is True
    assert notices.dismiss(notice.id) is False


@pytest.mark.asyncio
async def test_push_appends_and_moves_conversation_to_front(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    a = store.add_conversation([me.id, bob.id])
    b = store.add_conversation([me.id, carol.id])
    store.add_message(a, bob.id, ts=10)
    store.add_message(b, carol.id, ts=20)
    await engine.load(me.id)
    before = list(engine.conversation(a).messages)

    pushed = make_message(a, bob.id, ts=30)
    assert engine.handle_inserted_message(pushed) is True

    assert _ids(engine) == [a, b]
    assert engine.conversation(a).messages == before + [pushed]
    # pushing does not change the selection
    assert engine.active_conversation_id == b


@pytest.mark.asyncio
async def test_own_message_also_moves_conversation_to_front(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    a = store.add_conversation([me.id, bob.id])
    b = store.add_conversation([me.id, carol.id])
    store.add_message(b, carol.id, ts=20)
    await engine.load(me.id)

    engine.handle_inserted_message(make_message(a, me.id, ts=21))

    assert _ids(engine) == [a, b]


@pytest.mark.asyncio
async def test_push_sequence_keeps_arrival_order(store, engine, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    await engine.load(me.id)

    pushed = [make_message(conv, bob.id, ts=t) for t in (3, 1, 2)]
    for message in pushed:
        engine.handle_inserted_message(message)

    assert engine.conversation(conv).messages == pushed


@pytest.mark.asyncio
async def test_push_for_unknown_conversation_is_dropped(store, engine, notices, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    store.add_message(conv, bob.id, ts=1)
    await engine.load(me.id)
    snapshot = [(c.id, list(c.messages)) for c in engine.conversations]

    assert engine.handle_inserted_message(make_message(uuid.uuid4(), bob.id, ts=5)) is False

    assert [(c.id, list(c.messages)) for c in engine.conversations] == snapshot
    assert notices.pending() == ()


@pytest.mark.asyncio
async def test_duplicate_push_is_ignored(store, engine, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    loaded = store.add_message(conv, bob.id, ts=1)
    await engine.load(me.id)

    assert engine.handle_inserted_message(loaded) is False
    fresh = make_message(conv, bob.id, ts=2)
    engine.handle_inserted_message(fresh)
    engine.handle_inserted_message(fresh)

    assert engine.conversation(conv).messages == [loaded, fresh]


@pytest.mark.asyncio
async def test_send_message_without_push_leaves_state_unchanged(store, engine, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    await engine.load(me.id)

    assert await engine.send_message("hello there") is True

    assert engine.conversation(conv).messages == []
    [row] = store.inserted_messages
    assert row.conversation_id == conv
    assert row.sender_id == me.id
    assert row.content == "hello there"
    assert row.type == MessageType.TEXT
    assert row.status == MessageStatus.SENT


@pytest.mark.asyncio
async def test_send_message_becomes_visible_through_push(store, engine, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    await engine.load(me.id)

    await engine.send_message("data:image/png;base64,AAAA", MessageType.IMAGE)
    echoed = store.messages[-1]
    engine.handle_inserted_message(echoed)

    assert engine.conversation(conv).messages == [echoed]
    assert echoed.type == MessageType.IMAGE


@pytest.mark.asyncio
async def test_send_message_write_failure_posts_notice(store, engine, notices, me):
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])
    await engine.load(me.id)
    store.fail_on.add("insert_message")

    assert await engine.send_message("hi") is False

    assert engine.conversation(conv).messages == []
    [notice] = notices.pending()
    assert notice.kind == NoticeKind.WRITE_FAILURE
    assert notices.dismiss(notice.id) is True


@pytest.mark.asyncio
async def test_send_message_requires_active_conversation(store, engine, notices, me):
    await engine.load(me.id)

    assert await engine.send_message("hi") is False

    assert store.inserted_messages == []
    assert notices.pending()[0].kind == NoticeKind.INVALID_COMMAND


@pytest.mark.asyncio
async def test_select_conversation(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    a = store.add_conversation([me.id, bob.id])
    b = store.add_conversation([me.id, carol.id])
    await engine.load(me.id)

    assert engine.select_conversation(b) is True
    assert engine.active_conversation_id == b
    assert engine.select_conversation(uuid.uuid4()) is False
    assert engine.active_conversation_id == b
    await engine.send_message("to b")
    assert store.inserted_messages[-1].conversation_id == b
    assert a != b


@pytest.mark.asyncio
async def test_create_private_conversation_is_idempotent(store, engine, me):
    bob = store.add_user("Bob")
    await engine.load(me.id)

    first = await engine.create_conversation([bob.id])
    second = await engine.create_conversation([bob.id, me.id])

    assert first is not None
    assert first == second
    assert len(store.conversations) == 1
    assert store.members_of(first) == {me.id, bob.id}
    assert _ids(engine) == [first]
    assert engine.active_conversation_id == first
    created = engine.conversation(first)
    assert created.type == ConversationType.PRIVATE
    assert created.name is None
    assert created.avatar is None


@pytest.mark.asyncio
async def test_create_reuses_private_conversation_created_elsewhere(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    existing = store.add_conversation([me.id, bob.id])
    other = store.add_conversation([me.id, carol.id])
    store.add_message(other, carol.id, ts=5)
    await engine.load(me.id)
    assert engine.active_conversation_id == other

    assert await engine.create_conversation([bob.id]) == existing

    assert engine.active_conversation_id == existing
    assert "insert_conversation" not in store.calls


@pytest.mark.asyncio
async def test_create_conversation_with_only_yourself_fails(store, engine, notices, me):
    await engine.load(me.id)

    assert await engine.create_conversation([me.id]) is None

    assert store.conversations == []
    assert notices.pending()[0].kind == NoticeKind.INVALID_COMMAND


@pytest.mark.asyncio
async def test_create_group_conversation(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    old = store.add_conversation([me.id, bob.id])
    store.add_message(old, bob.id, ts=100)
    await engine.load(me.id)

    group_id = await engine.create_conversation([bob.id, carol.id], "Book Club")

    group = engine.conversation(group_id)
    assert group.type == ConversationType.GROUP
    assert group.name == "Book Club"
    assert group.avatar == "https://api.dicebear.com/8.x/initials/svg?seed=Book%20Club"
    assert group.participants == frozenset({me.id, bob.id, carol.id})
    assert group.messages == []
    assert _ids(engine) == [group_id, old]
    assert engine.active_conversation_id == group_id
    assert "find_private_conversation" not in store.calls


@pytest.mark.asyncio
async def test_named_two_person_conversation_is_a_group(store, engine, me):
    bob = store.add_user("Bob")
    await engine.load(me.id)

    conv_id = await engine.create_conversation([bob.id], "Project X")

    assert engine.conversation(conv_id).type == ConversationType.GROUP
    assert "find_private_conversation" not in store.calls


@pytest.mark.asyncio
async def test_unnamed_group_gets_name_from_members(store, engine, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    await engine.load(me.id)

    conv_id = await engine.create_conversation([bob.id, carol.id])

    conv = engine.conversation(conv_id)
    assert conv.name == "Bob, Carol"
    assert conv.avatar.endswith("seed=Bob%2C%20Carol")


@pytest.mark.asyncio
async def test_create_conversation_insert_failure(store, engine, notices, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    await engine.load(me.id)
    store.fail_on.add("insert_conversation")

    assert await engine.create_conversation([bob.id, carol.id], "G") is None

    assert engine.conversations == ()
    assert notices.pending()[0].kind == NoticeKind.WRITE_FAILURE


@pytest.mark.asyncio
async def test_participant_insert_failure_leaves_orphan_row(store, engine, notices, me):
    bob = store.add_user("Bob")
    carol = store.add_user("Carol")
    await engine.load(me.id)
    store.fail_on.add("insert_participants")

    assert await engine.create_conversation([bob.id, carol.id], "G") is None

    assert len(store.conversations) == 1
    assert store.participants == []
    assert engine.conversations == ()
    assert engine.active_conversation_id is None
    assert notices.pending()[0].kind == NoticeKind.PARTIAL_CREATE_FAILURE


def test_order_by_recency_is_stable_for_equal_timestamps():
    user = uuid.uuid4()
    convs = []
    for _ in range(3):
        conv = Conversation(id=uuid.uuid4(), type=ConversationType.PRIVATE, participants=frozenset())
        conv.messages.append(make_message(conv.id, user, ts=7))
        convs.append(conv)

    assert order_by_recency(convs) == convs


@pytest.mark.asyncio
async def test_change_callback_fires_on_mutation(store, notices, me):
    changes = []
    engine = ConversationSyncEngine(store, notices, on_change=lambda: changes.append(1))
    bob = store.add_user("Bob")
    conv = store.add_conversation([me.id, bob.id])

    await engine.load(me.id)
    engine.handle_inserted_message(make_message(conv, bob.id, ts=1))
    engine.handle_inserted_message(make_message(uuid.uuid4(), bob.id, ts=1))

    assert len(changes) == 2


@pytest.mark.asyncio
async def test_send_blank_text_is_rejected(store, engine, notices, me):
    bob = store.add_user("Bob")
    store.add_conversation([me.id, bob.id])
    await engine.load(me.id)

    assert await engine.send_message("   \n ") is False

    assert store.inserted_messages == []
    assert notices.pending()[0].kind == NoticeKind.INVALID_COMMAND


@pytest.mark.asyncio
async def test_send_text_is_trimmed(store, engine, me):
    bob = store.add_user("Bob")
    store.add_conversation([me.id, bob.id])
    await engine.load(me.id)

    await engine.send_message("  see you soon \n")

    assert store.inserted_messages[-1].content == "see you soon"


@pytest.mark.asyncio
async def test_send_media_payload_is_not_trimmed(store, engine, me):
    bob = store.add_user("Bob")
    store.add_conversation([me.id, bob.id])
    await engine.load(me.id)

    await engine.send_message(" blob:voice-1 ", MessageType.VOICE)

    assert store.inserted_messages[-1].content == " blob:voice-1 "
