# tests/test_notifier.py

from __future__ import annotations

import time
from pathlib import Path

from taskboard.storage.json_store import JsonStore
from taskboard.storage.notifier import ChangeNotifier, ChangeOrigin, ChangeWatcher

from .fakes import RecordingListener


def test_publish_reaches_matching_subscribers_only(notifier: ChangeNotifier) -> None:
    all_keys = RecordingListener()
    only_tasks = RecordingListener()
    notifier.subscribe(all_keys)
    notifier.subscribe(only_tasks, keys=["tasks"])

    notifier.publish("users", 1)
    notifier.publish("tasks", 1)

    assert all_keys.keys == ["users", "tasks"]
    assert only_tasks.keys == ["tasks"]
    assert only_tasks.events[0].origin == ChangeOrigin.LOCAL


def test_cancelled_subscription_stops_receiving(notifier: ChangeNotifier) -> None:
    rec = RecordingListener()
    sub = notifier.subscribe(rec)
    sub.cancel()
    sub.cancel()

    notifier.publish("users", 1)

    assert rec.events == []
    assert notifier.subscriber_count == 0


def test_failing_listener_does_not_block_others(notifier: ChangeNotifier) -> None:
    def boom(_event) -> None:
        raise RuntimeError("listener bug")

    rec = RecordingListener()
    notifier.subscribe(boom)
    notifier.subscribe(rec)

    notifier.publish("users", 1)

    assert rec.keys == ["users"]


def test_sync_external_picks_up_other_process_writes(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    tab_a = JsonStore(db)
    tab_b = JsonStore(db)
    notifier_a = ChangeNotifier(tab_a)
    notifier_b = ChangeNotifier(tab_b)
    seen_by_b = RecordingListener()
    notifier_b.subscribe(seen_by_b)

    version = tab_a.write("shared_chat_history", [{"id": "a-b"}])
    notifier_a.publish("shared_chat_history", version)

    events = notifier_b.sync_external()

    assert [(e.key, e.version, e.origin) for e in events] == [("shared_chat_history", 1, ChangeOrigin.EXTERNAL)]
    assert seen_by_b.keys == ["shared_chat_history"]
    # Already seen: a second poll is quiet.
    assert notifier_b.sync_external() == []


def test_sync_external_ignores_own_local_writes(store: JsonStore, notifier: ChangeNotifier) -> None:
    version = store.write("tasks", [])
    notifier.publish("tasks", version)

    assert notifier.sync_external() == []


def test_watcher_thread_delivers_external_changes(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    writer = JsonStore(db)
    reader = JsonStore(db)
    notifier = ChangeNotifier(reader)
    rec = RecordingListener()
    notifier.subscribe(rec, keys=["users"])

    watcher = ChangeWatcher(notifier, interval_seconds=0.05).start()
    try:
        writer.write("users", [{"id": "u1"}])
        deadline = time.monotonic() + 5.0
        while not rec.events and time.monotonic() < deadline:
            time.sleep(0.02)
    finally:
        watcher.stop()
        watcher.join(timeout=5.0)

    assert rec.keys == ["users"]
