# src/taskboard/storage/json_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonStore:
    """
    SQLite-backed keyed JSON store.

    Every key holds one JSON document, usually an array of records ("a table").
    A write replaces the whole document in a single statement, so readers never
    observe a partial write. Each write bumps a per-key version counter which
    other processes sharing the file use to detect changes.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "store.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = len(self.versions())
        except sqlite3.Error:
            total = -1
        logger.info("JsonStore ready db=%s keys=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 0,
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _get_raw(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def _put_raw(self, key: str, raw: str) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            # The implicit transaction holds the write lock until commit, so the
            # version read back is the one this statement produced.
            cur.execute(
                """
                INSERT INTO kv(key, value, version, updated_at)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(key) DO UPDATE
                    SET value = excluded.value,
                        version = kv.version + 1,
                        updated_at = excluded.updated_at
                """,
                (key, raw, time.time()),
            )
            cur.execute("SELECT version FROM kv WHERE key = ?", (key,))
            (version,) = cur.fetchone()
            conn.commit()
            return int(version)
        finally:
            conn.close()

    @staticmethod
    def _dumps(value: Any) -> str:
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"value is not JSON-serializable: {e}") from e

    # ---- public API ----

    def read(self, key: str) -> list[dict[str, Any]]:
        """
        Return the records stored under key.

        Never fails: a missing key, unparsable content or a non-array document
        is logged and read as an empty collection.
        """
        raw = self._get_raw(key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Corrupt JSON under key=%s; treating as empty.", key)
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("Key=%s holds %s, expected a list; treating as empty.", key, type(data).__name__)
            return []

        records = [r for r in data if isinstance(r, dict)]
        if len(records) != len(data):
            logger.warning("Key=%s: dropped %d non-object records.", key, len(data) - len(records))
        return records

    def write(self, key: str, records: list[dict[str, Any]]) -> int:
        """Replace the whole collection under key. Returns the new version."""
        version = self._put_raw(key, self._dumps(list(records)))
        logger.debug("Wrote key=%s records=%d version=%d", key, len(records), version)
        return version

    def read_value(self, key: str) -> dict[str, Any] | None:
        """Single-object slot (e.g. the persisted session). Corrupt content reads as None."""
        raw = self._get_raw(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Corrupt JSON under key=%s; treating as missing.", key)
            return None
        return data if isinstance(data, dict) else None

    def write_value(self, key: str, value: dict[str, Any]) -> int:
        return self._put_raw(key, self._dumps(value))

    def delete(self, key: str) -> int:
        # Keep the row so the version keeps counting up for change detection.
        return self._put_raw(key, "null")

    def version(self, key: str) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT version FROM kv WHERE key = ?", (key,)).fetchone()
            return int(row["version"]) if row else 0
        finally:
            conn.close()

    def versions(self) -> dict[str, int]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT key, version FROM kv").fetchall()
            return {str(r["key"]): int(r["version"]) for r in rows}
        finally:
            conn.close()
