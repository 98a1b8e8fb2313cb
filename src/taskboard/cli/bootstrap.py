# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, notifier, repositories and session into AppState,
- seeds the system admin.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..auth.session import SessionGate
from ..config import get_settings
from ..conversations.store import ConversationStore
from ..core.ports import Clock
from ..core.state import AppState
from ..entities.repository import EntityRepository
from ..storage.json_store import JsonStore
from ..storage.keys import StoreKeys
from ..storage.notifier import ChangeNotifier

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    Path(getattr(settings, "data_dir", ".local/taskboard")).mkdir(parents=True, exist_ok=True)
    Path(settings.store_db_path).parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = JsonStore(settings.store_db_path)
    notifier = ChangeNotifier(store)
    keys = StoreKeys.with_prefix(getattr(settings, "key_prefix", "task_tracker"))

    repo = EntityRepository(store, notifier, keys=keys, clock=clock)
    repo.ensure_seed_admin(
        email=getattr(settings, "admin_email", "admin@admin.com"),
        password=getattr(settings, "admin_password", "admin"),
        name=getattr(settings, "admin_name", "System Admin"),
    )

    state = AppState(
        settings=settings,
        store=store,
        notifier=notifier,
        repo=repo,
        conversations=ConversationStore(store, notifier, key=keys.conversations, clock=clock),
        session=SessionGate(repo, store),
    )
    logger.info("State ready store=%s users_key=%s", store.db_path, keys.users)
    return state
