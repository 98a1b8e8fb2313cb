# src/taskboard/conversations/models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


def get_conversation_id(user_a: str, user_b: str) -> str:
    """Primary key of the thread between two users; argument order does not matter."""
    return "-".join(sorted((str(user_a), str(user_b))))


@dataclass(slots=True, frozen=True)
class Message:
    id: str
    text: str
    sender_id: str
    time: str  # display time, HH:MM
    read: bool = False
    sent_at: str | None = None

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Message:
        return cls(
            # Legacy records carry numeric (timestamp) ids.
            id=str(rec.get("id") or ""),
            text=str(rec.get("text") or ""),
            sender_id=str(rec.get("senderId") or ""),
            time=str(rec.get("time") or ""),
            read=bool(rec.get("read", False)),
            sent_at=rec.get("sentAt"),
        )

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "senderId": self.sender_id,
            "time": self.time,
            "read": self.read,
        }
        if self.sent_at is not None:
            rec["sentAt"] = self.sent_at
        return rec

    def unread_for(self, user_id: str) -> bool:
        return not self.read and self.sender_id != user_id

    def mark_read(self) -> Message:
        # Only the read flag ever changes after creation.
        return replace(self, read=True)


@dataclass(slots=True)
class Conversation:
    id: str
    participants: list[str]
    messages: list[Message] = field(default_factory=list)

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Conversation:
        parts = rec.get("participants")
        msgs = rec.get("messages")
        return cls(
            id=str(rec.get("id") or ""),
            participants=[str(p) for p in parts] if isinstance(parts, list) else [],
            messages=[Message.from_record(m) for m in msgs if isinstance(m, dict)] if isinstance(msgs, list) else [],
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "participants": list(self.participants),
            "messages": [m.to_record() for m in self.messages],
        }

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def other_participant(self, user_id: str) -> str | None:
        for p in self.participants:
            if p != user_id:
                return p
        return None

    def unread_count_for(self, user_id: str) -> int:
        return sum(1 for m in self.messages if m.unread_for(user_id))

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None


@dataclass(slots=True, frozen=True)
class ConversationSummary:
    """One row of a user's conversation list."""

    conversation_id: str
    other_user_id: str | None
    last_message: Message | None
    unread_count: int
