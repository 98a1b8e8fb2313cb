# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

Repositories depend on Protocols instead of concrete implementations.
This keeps the storage backend swappable and makes testing easier.
"""

from datetime import datetime
from typing import Any, Callable, Protocol

Record = dict[str, Any]
# Plain JSON-serializable record as persisted; relationships are by id only.

Clock = Callable[[], datetime]
# Returns an aware datetime ("now"); injected so lateness checks are deterministic in tests.


class VersionedStore(Protocol):
    """Keyed JSON collections with per-key write counters."""

    def read(self, key: str) -> list[Record]: ...
    def write(self, key: str, records: list[Record]) -> int: ...

    def read_value(self, key: str) -> Record | None: ...
    def write_value(self, key: str, value: Record) -> int: ...
    def delete(self, key: str) -> int: ...

    def version(self, key: str) -> int: ...
    def versions(self) -> dict[str, int]: ...


class ChangePublisher(Protocol):
    """What a repository needs from the notifier: announce that a key was written."""

    def publish(self, key: str, version: int, *, origin: Any = ...) -> Any: ...
