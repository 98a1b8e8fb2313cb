# src/taskboard/storage/notifier.py

from __future__ import annotations

"""
Change notifier.

Publish/subscribe over store keys. There is no diff in an event, only
"key K changed, now at version V"; subscribers re-read what they need.

Two sources of events:
- local writes: repositories call publish() right after writing,
- external writes: another process sharing the same store file wrote a key;
  sync_external() notices the version bump and republishes it here.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum

from ..core.ports import VersionedStore

logger = logging.getLogger(__name__)


class ChangeOrigin(StrEnum):
    LOCAL = "local"
    EXTERNAL = "external"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    key: str
    version: int
    origin: ChangeOrigin


ChangeListener = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by subscribe(); cancel() is idempotent."""

    def __init__(self, notifier: ChangeNotifier, listener: ChangeListener, keys: frozenset[str] | None) -> None:
        self._notifier = notifier
        self.listener = listener
        self.keys = keys
        self.active = True

    def matches(self, key: str) -> bool:
        return self.keys is None or key in self.keys

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._notifier._remove(self)


class ChangeNotifier:
    """Per-process broadcast of store changes."""

    def __init__(self, store: VersionedStore) -> None:
        self._store = store
        self._subs: list[Subscription] = []
        self._seen: dict[str, int] = {}
        self._lock = threading.RLock()
        try:
            self._seen.update(store.versions())
        except Exception:
            logger.exception("Failed to read initial store versions; starting from zero.")

    def subscribe(self, listener: ChangeListener, keys: Iterable[str] | None = None) -> Subscription:
        sub = Subscription(self, listener, frozenset(keys) if keys is not None else None)
        with self._lock:
            self._subs.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)

    def publish(self, key: str, version: int, *, origin: ChangeOrigin = ChangeOrigin.LOCAL) -> ChangeEvent:
        event = ChangeEvent(key=key, version=int(version), origin=origin)
        with self._lock:
            if version > self._seen.get(key, 0):
                self._seen[key] = int(version)
            targets = [s for s in self._subs if s.matches(key)]

        logger.debug("Change key=%s version=%s origin=%s listeners=%d", key, version, origin.value, len(targets))
        for sub in targets:
            if not sub.active:
                continue
            try:
                sub.listener(event)
            except Exception:
                logger.exception("Change listener failed key=%s", key)
        return event

    def sync_external(self) -> list[ChangeEvent]:
        """
        Publish keys whose stored version moved past what this process has seen.

        Returns the events published (empty if nothing changed).
        """
        current = self._store.versions()
        with self._lock:
            changed = [(k, v) for k, v in current.items() if v > self._seen.get(k, 0)]

        return [self.publish(k, v, origin=ChangeOrigin.EXTERNAL) for k, v in sorted(changed)]


class ChangeWatcher:
    """
    Background thread that polls the store for writes made by other processes.

    Why a thread: the console REPL blocks on input(), and external writes must
    still reach subscribers (e.g. the unread badge) while it waits.
    """

    def __init__(self, notifier: ChangeNotifier, *, interval_seconds: float = 1.0) -> None:
        self._notifier = notifier
        self._interval = max(0.05, float(interval_seconds))
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="taskboard-change-watcher", daemon=True)

    def start(self) -> ChangeWatcher:
        self._thread.start()
        logger.info("Change watcher started (interval=%.2fs).", self._interval)
        return self

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self._notifier.sync_external()
            except Exception:
                logger.exception("sync_external failed")
            self._stop.wait(self._interval)

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout=timeout)
