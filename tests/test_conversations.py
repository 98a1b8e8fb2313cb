# tests/test_conversations.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskboard.conversations.models import get_conversation_id
from taskboard.conversations.store import ConversationStore
from taskboard.errors import EmptyMessage, NotFound
from taskboard.storage.json_store import JsonStore
from taskboard.storage.notifier import ChangeNotifier

from .fakes import FakeClock, RecordingListener


@pytest.fixture()
def chats(store: JsonStore, notifier: ChangeNotifier, clock: FakeClock) -> ConversationStore:
    return ConversationStore(store, notifier, clock=clock)


@pytest.mark.parametrize(
    ("a", "b"),
    [("u1", "u2"), ("admin_1", "9f0c"), ("same-prefix-a", "same-prefix-b"), ("Z", "a")],
)
def test_conversation_id_is_symmetric(a: str, b: str) -> None:
    assert get_conversation_id(a, b) == get_conversation_id(b, a)
    assert ConversationStore.get_conversation_id(a, b) == get_conversation_id(a, b)


def test_conversation_id_format() -> None:
    assert get_conversation_id("u2", "u1") == "u1-u2"


def test_scenario_send_then_read(chats: ConversationStore) -> None:
    conv = chats.send_message("user1", "user2", "hi")

    assert conv.id == get_conversation_id("user1", "user2")
    assert conv.participants == ["user1", "user2"]
    assert chats.get_unread_count_for_user("user2") == 1
    assert chats.get_unread_count_for_user("user1") == 0

    assert chats.mark_conversation_read(conv.id, "user2") == 1
    assert chats.get_unread_count_for_user("user2") == 0


def test_one_thread_per_pair(chats: ConversationStore) -> None:
    chats.send_message("a", "b", "one")
    conv = chats.send_message("b", "a", "two")

    assert len(chats.list_conversations()) == 1
    assert [m.text for m in conv.messages] == ["one", "two"]
    assert conv.participants == ["a", "b"]
    assert len({m.id for m in conv.messages}) == 2


def test_message_fields(chats: ConversationStore, clock: FakeClock) -> None:
    msg = chats.send_message("a", "b", "  padded text  ").messages[-1]

    assert msg.text == "  padded text  "
    assert msg.sender_id == "a"
    assert msg.read is False
    assert len(msg.time) == 5 and msg.time[2] == ":"
    assert msg.sent_at is not None


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_message_is_rejected_without_write(
    chats: ConversationStore, listener: RecordingListener, text: str
) -> None:
    with pytest.raises(EmptyMessage):
        chats.send_message("a", "b", text)
    assert chats.list_conversations() == []
    assert listener.events == []


def test_cannot_message_yourself(chats: ConversationStore) -> None:
    with pytest.raises(ValueError):
        chats.send_message("a", "a", "hello me")


def test_unread_ignores_own_messages_and_other_threads(chats: ConversationStore) -> None:
    chats.send_message("a", "b", "1")
    chats.send_message("a", "b", "2")
    chats.send_message("b", "a", "3")
    chats.send_message("c", "b", "4")

    assert chats.get_unread_count_for_user("b") == 3
    assert chats.get_unread_count_for_user("a") == 1
    assert chats.get_unread_count_for_user("c") == 0

    ab = get_conversation_id("a", "b")
    assert chats.unread_count_in_conversation(ab, "b") == 2

    before = chats.get_unread_count_for_user("b")
    flipped = chats.mark_conversation_read(ab, "b")
    assert flipped == 2
    assert chats.get_unread_count_for_user("b") == before - flipped
    # a's unread message in the same thread is untouched.
    assert chats.get_unread_count_for_user("a") == 1


def test_mark_read_without_changes_does_not_publish(
    chats: ConversationStore, listener: RecordingListener, store: JsonStore
) -> None:
    conv = chats.send_message("a", "b", "hi")
    chats.mark_conversation_read(conv.id, "b")
    version = store.version(chats.key)
    listener.events.clear()

    assert chats.mark_conversation_read(conv.id, "b") == 0
    # The sender opening the thread never flips their own messages.
    assert chats.mark_conversation_read(conv.id, "a") == 0
    assert chats.mark_conversation_read("no-such-thread", "a") == 0
    assert chats.mark_conversation_read(conv.id, "stranger") == 0

    assert listener.events == []
    assert store.version(chats.key) == version


def test_read_flag_is_the_only_change(chats: ConversationStore) -> None:
    conv = chats.send_message("a", "b", "hi")
    before = conv.messages[0]

    chats.mark_conversation_read(conv.id, "b")
    after = chats.get_conversation(conv.id).messages[0]

    assert after.read is True
    assert (after.id, after.text, after.sender_id, after.time) == (before.id, before.text, before.sender_id, before.time)


def test_conversations_for_user_orders_by_latest(chats: ConversationStore, clock: FakeClock) -> None:
    chats.send_message("a", "b", "old")
    clock.advance(minutes=5)
    chats.send_message("c", "a", "new")

    summaries = chats.conversations_for_user("a")

    assert [s.other_user_id for s in summaries] == ["c", "b"]
    assert summaries[0].unread_count == 1
    assert summaries[0].last_message is not None and summaries[0].last_message.text == "new"
    assert summaries[1].unread_count == 0


def test_get_conversation_not_found(chats: ConversationStore) -> None:
    with pytest.raises(NotFound):
        chats.get_conversation("x-y")


def test_two_tabs_converge(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    tab_a_store, tab_b_store = JsonStore(db), JsonStore(db)
    tab_a = ConversationStore(tab_a_store, ChangeNotifier(tab_a_store))
    notifier_b = ChangeNotifier(tab_b_store)
    tab_b = ConversationStore(tab_b_store, notifier_b)

    badge: list[int] = []
    notifier_b.subscribe(lambda _e: badge.append(tab_b.get_unread_count_for_user("u2")), keys=[tab_b.key])

    tab_a.send_message("u1", "u2", "ping")
    notifier_b.sync_external()

    assert badge == [1]

    tab_b.mark_conversation_read(get_conversation_id("u1", "u2"), "u2")
    assert badge == [1, 0]
    assert tab_a.get_unread_count_for_user("u2") == 0


def test_legacy_numeric_message_ids_load(store: JsonStore, chats: ConversationStore) -> None:
    store.write(
        chats.key,
        [
            {
                "id": "u1-u2",
                "participants": ["u2", "u1"],
                "messages": [{"id": 1700000000000, "text": "old", "senderId": "u2", "time": "10:30", "read": False}],
            }
        ],
    )

    assert chats.get_unread_count_for_user("u1") == 1
    assert chats.get_conversation("u1-u2").messages[0].id == "1700000000000"
