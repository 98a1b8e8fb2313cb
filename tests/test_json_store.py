# tests/test_json_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from taskboard.storage.json_store import JsonStore


def _put_raw(db: Path, key: str, raw: str) -> None:
    conn = sqlite3.connect(str(db))
    try:
        conn.execute(
            "INSERT OR REPLACE INTO kv(key, value, version, updated_at) VALUES (?, ?, 1, 0)",
            (key, raw),
        )
        conn.commit()
    finally:
        conn.close()


def test_read_missing_key_is_empty(store: JsonStore) -> None:
    assert store.read("nope") == []
    assert store.version("nope") == 0
    assert store.read_value("nope") is None


def test_write_replaces_whole_collection_and_bumps_version(store: JsonStore) -> None:
    v1 = store.write("t", [{"id": "a"}, {"id": "b"}])
    v2 = store.write("t", [{"id": "c"}])

    assert (v1, v2) == (1, 2)
    assert store.read("t") == [{"id": "c"}]
    assert store.versions() == {"t": 2}


def test_two_handles_on_one_file_see_each_other(tmp_path: Path) -> None:
    a = JsonStore(tmp_path / "shared.sqlite3")
    b = JsonStore(tmp_path / "shared.sqlite3")

    a.write("users", [{"id": "u1", "name": "Ünïcode"}])

    assert b.read("users") == [{"id": "u1", "name": "Ünïcode"}]
    assert b.version("users") == 1


def test_corrupt_json_reads_as_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    db = tmp_path / "store.sqlite3"
    store = JsonStore(db)
    _put_raw(db, "t", "{not json")

    assert store.read("t") == []
    assert store.read_value("t") is None
    assert "Corrupt JSON" in caplog.text


def test_non_list_document_reads_as_empty(tmp_path: Path) -> None:
    db = tmp_path / "store.sqlite3"
    store = JsonStore(db)
    _put_raw(db, "t", '{"id": "x"}')
    _put_raw(db, "mixed", '[{"id": "x"}, 3, "s"]')

    assert store.read("t") == []
    assert store.read("mixed") == [{"id": "x"}]


def test_value_slot_and_delete(store: JsonStore) -> None:
    store.write_value("session", {"id": "u1"})
    assert store.read_value("session") == {"id": "u1"}

    v = store.delete("session")

    assert store.read_value("session") is None
    assert store.read("session") == []
    # Deleting still counts as a write for change detection.
    assert v == 2


def test_unserializable_records_are_rejected(store: JsonStore) -> None:
    with pytest.raises(ValueError):
        store.write("t", [{"x": object()}])
    assert store.read("t") == []
