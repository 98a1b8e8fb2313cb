# src/taskboard/storage/keys.py

from __future__ import annotations

from dataclasses import dataclass

# The chat table was never namespaced; every deployment shares this key.
CONVERSATIONS_KEY = "shared_chat_history"


@dataclass(frozen=True, slots=True)
class StoreKeys:
    """Names of the independent collections in the store (one unit of atomicity each)."""

    users: str
    tasks: str
    conversations: str
    current_user: str

    @classmethod
    def with_prefix(cls, prefix: str = "task_tracker") -> StoreKeys:
        prefix = (prefix or "task_tracker").strip()
        return cls(
            users=f"{prefix}_users",
            tasks=f"{prefix}_tasks",
            conversations=CONVERSATIONS_KEY,
            current_user=f"{prefix}_current_user",
        )
