# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..storage.notifier import ChangeEvent, Subscription

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class UnreadBadge:
    """
    Console stand-in for the sidebar badge.

    Re-reads the unread count for the signed-in user whenever the chat
    collection changes (locally or from another process) and prints it when
    the number moves.
    """

    def __init__(self, state: AppState) -> None:
        self._state = state
        self._last: tuple[str | None, int] = (None, 0)
        self._sub: Subscription | None = None

    def start(self) -> None:
        self._sub = self._state.notifier.subscribe(self._on_change, keys=[self._state.conversations.key])
        self.refresh(announce=False)

    def stop(self) -> None:
        if self._sub is not None:
            self._sub.cancel()
            self._sub = None

    def _on_change(self, event: ChangeEvent) -> None:
        self.refresh(announce=True)

    def refresh(self, *, announce: bool) -> int:
        with self._state.lock:
            user = self._state.session.current_user
            if user is None:
                self._last = (None, 0)
                return 0
            count = self._state.conversations.get_unread_count_for_user(user.id)
            previous = self._last
            self._last = (user.id, count)

        if announce and previous != (user.id, count) and count > 0:
            _print_ts(f"[INBOX] You have {count} unread message(s). Use /inbox.")
        return count


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    badge = UnreadBadge(state)
    badge.start()

    def emit(text: str) -> None:
        # Immediate user-visible feedback while a simulated round-trip runs.
        _print_ts(text)

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                with state.lock:
                    response = command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is None:
                response = "Commands start with '/'. Use /help to list them."

            _print_ts(response)
            # Login/logout changes whose badge we show.
            badge.refresh(announce=False)
    finally:
        badge.stop()

    logger.info("Console connector finished.")
