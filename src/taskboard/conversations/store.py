# src/taskboard/conversations/store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from ..core.ports import ChangePublisher, Clock, VersionedStore
from ..entities.models import iso_utc
from ..errors import EmptyMessage, NotFound
from ..storage.keys import CONVERSATIONS_KEY
from .models import Conversation, ConversationSummary, Message, get_conversation_id

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_message_id() -> str:
    return uuid.uuid4().hex


class ConversationStore:
    """
    Message threads between pairs of users, in their own collection.

    At most one thread exists per unordered pair (the id is derived from the pair).
    Unread counts are always recomputed from storage, never cached, so every
    view that re-reads after a change event sees the same number.
    """

    def __init__(
        self,
        store: VersionedStore,
        notifier: ChangePublisher | None = None,
        *,
        key: str = CONVERSATIONS_KEY,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._key = key
        self._clock = clock or _utc_now
        self._new_id = id_factory or _new_message_id

    @property
    def key(self) -> str:
        return self._key

    get_conversation_id = staticmethod(get_conversation_id)

    # ---- low-level helpers ----

    def _load(self) -> list[Conversation]:
        return [Conversation.from_record(r) for r in self._store.read(self._key)]

    def _save(self, conversations: list[Conversation]) -> None:
        version = self._store.write(self._key, [c.to_record() for c in conversations])
        if self._notifier is not None:
            self._notifier.publish(self._key, version)

    # ---- public API ----

    def list_conversations(self) -> list[Conversation]:
        return self._load()

    def get_conversation(self, conversation_id: str) -> Conversation:
        for c in self._load():
            if c.id == conversation_id:
                return c
        raise NotFound("Conversation not found")

    def find_between(self, user_a: str, user_b: str) -> Conversation | None:
        conv_id = get_conversation_id(user_a, user_b)
        for c in self._load():
            if c.id == conv_id:
                return c
        return None

    def send_message(self, sender_id: str, recipient_id: str, text: str) -> Conversation:
        if not text or not text.strip():
            raise EmptyMessage()
        if not sender_id or not recipient_id:
            raise ValueError("sender_id and recipient_id are required")
        if sender_id == recipient_id:
            raise ValueError("cannot send a message to yourself")

        now = self._clock()
        message = Message(
            id=self._new_id(),
            text=text,
            sender_id=sender_id,
            time=now.astimezone().strftime("%H:%M"),
            read=False,
            sent_at=iso_utc(now),
        )

        conv_id = get_conversation_id(sender_id, recipient_id)
        conversations = self._load()
        conv = next((c for c in conversations if c.id == conv_id), None)
        if conv is None:
            conv = Conversation(id=conv_id, participants=[sender_id, recipient_id], messages=[])
            conversations.append(conv)
            logger.debug("Conversation created id=%s", conv_id)

        conv.messages.append(message)
        self._save(conversations)
        logger.debug("Message sent conversation=%s message=%s", conv_id, message.id)
        return conv

    def mark_conversation_read(self, conversation_id: str, reader_id: str) -> int:
        """
        Mark messages addressed to reader_id as read. Returns how many flipped.

        Nothing is written or published when nothing changes, so views reacting
        to change events cannot ping-pong each other.
        """
        conversations = self._load()
        conv = next((c for c in conversations if c.id == conversation_id), None)
        if conv is None:
            return 0
        if not conv.has_participant(reader_id):
            logger.warning("mark_conversation_read: %s is not in conversation %s", reader_id, conversation_id)
            return 0

        flipped = 0
        updated: list[Message] = []
        for m in conv.messages:
            if m.unread_for(reader_id):
                updated.append(m.mark_read())
                flipped += 1
            else:
                updated.append(m)

        if flipped == 0:
            return 0

        conv.messages = updated
        self._save(conversations)
        logger.debug("Marked %d messages read conversation=%s reader=%s", flipped, conversation_id, reader_id)
        return flipped

    def get_unread_count_for_user(self, user_id: str) -> int:
        return sum(c.unread_count_for(user_id) for c in self._load() if c.has_participant(user_id))

    def unread_count_in_conversation(self, conversation_id: str, user_id: str) -> int:
        for c in self._load():
            if c.id == conversation_id:
                return c.unread_count_for(user_id) if c.has_participant(user_id) else 0
        return 0

    def conversations_for_user(self, user_id: str) -> list[ConversationSummary]:
        """The user's threads, most recent activity first; empty threads last."""
        out = [
            ConversationSummary(
                conversation_id=c.id,
                other_user_id=c.other_participant(user_id),
                last_message=c.last_message,
                unread_count=c.unread_count_for(user_id),
            )
            for c in self._load()
            if c.has_participant(user_id)
        ]
        out.sort(key=lambda s: (s.last_message.sent_at or "") if s.last_message else "", reverse=True)
        return out
