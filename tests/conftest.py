# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.entities.models import User
from taskboard.entities.repository import EntityRepository
from taskboard.storage.json_store import JsonStore
from taskboard.storage.notifier import ChangeNotifier

from .fakes import FakeClock, RecordingListener


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic (no simulated latency).
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        key_prefix="task_tracker",
        login_delay_ms=0,
        write_delay_ms=0,
        admin_email="admin@admin.com",
        admin_password="admin",
        admin_name="System Admin",
        watch_interval_seconds=0.05,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path / "store.sqlite3")


@pytest.fixture()
def notifier(store: JsonStore) -> ChangeNotifier:
    return ChangeNotifier(store)


@pytest.fixture()
def listener(notifier: ChangeNotifier) -> RecordingListener:
    rec = RecordingListener()
    notifier.subscribe(rec)
    return rec


@pytest.fixture()
def repo(store: JsonStore, notifier: ChangeNotifier, clock: FakeClock) -> EntityRepository:
    r = EntityRepository(store, notifier, clock=clock)
    r.ensure_seed_admin()
    return r


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    """
    AppState wired exactly as the CLI wires it.

    NOTE: We keep the real SQLite store here because its behavior
    (whole-collection writes, versions) is part of what we want to test.
    """
    return create_initial_state(settings=settings, clock=clock)


@pytest.fixture()
def employee(repo: EntityRepository) -> User:
    return repo.register({"name": "Erin Employee", "email": "erin@x.com", "password": "pw-erin"})


@pytest.fixture()
def manager(repo: EntityRepository) -> User:
    return repo.create_manager({"name": "Max Manager", "email": "max@x.com", "password": "pw-max"})
