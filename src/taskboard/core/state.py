# src/taskboard/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ..auth.session import SessionGate
from ..conversations.store import ConversationStore
from ..entities.repository import EntityRepository
from ..storage.json_store import JsonStore
from ..storage.notifier import ChangeNotifier


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: JsonStore
    notifier: ChangeNotifier
    repo: EntityRepository
    conversations: ConversationStore
    session: SessionGate

    # Serializes command handling against change callbacks from the watcher thread.
    lock: threading.RLock = field(default_factory=threading.RLock)
