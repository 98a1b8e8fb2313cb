# src/taskboard/api.py

"""
Operation surface for the presentation layer.

Each call is a single attempt against the local store. Writes are preceded by
a simulated round-trip delay (settings.login_delay_ms / write_delay_ms) so
callers exercise the same awaiting/cancelling paths they would against a real
backend; cancelling while the delay runs leaves storage untouched.
"""

from __future__ import annotations

import asyncio
from typing import Any

from .conversations.models import Conversation
from .core.state import AppState
from .entities.models import Task, User, UserRole


async def _delay(state: AppState, attr: str, default_ms: int) -> None:
    ms = int(getattr(state.settings, attr, default_ms) or 0)
    if ms > 0:
        await asyncio.sleep(ms / 1000.0)


async def authenticate(state: AppState, email: str, password: str) -> User:
    await _delay(state, "login_delay_ms", 500)
    return state.session.login(email, password)


async def register_user(
    state: AppState,
    *,
    name: str,
    email: str,
    password: str,
    role: UserRole | str | None = None,
) -> User:
    await _delay(state, "login_delay_ms", 500)
    data: dict[str, Any] = {"name": name, "email": email, "password": password}
    if role is not None:
        data["role"] = UserRole(role).value
    return state.repo.register(data)


async def create_manager(state: AppState, *, name: str, email: str, password: str) -> User:
    await _delay(state, "login_delay_ms", 500)
    return state.repo.create_manager({"name": name, "email": email, "password": password})


async def list_users(state: AppState) -> list[User]:
    return state.repo.list_users()


async def list_tasks(state: AppState) -> list[Task]:
    return state.repo.list_tasks()


async def update_user(state: AppState, user_id: str, updates: dict[str, Any]) -> User:
    await _delay(state, "write_delay_ms", 300)
    return state.repo.update_user(user_id, updates)


async def delete_user(state: AppState, user_id: str) -> None:
    await _delay(state, "write_delay_ms", 300)
    state.repo.delete_user(user_id)


async def create_task(
    state: AppState,
    *,
    title: str,
    description: str,
    deadline: str,
    assigned_to: str,
    created_by: str | None = None,
) -> Task:
    await _delay(state, "write_delay_ms", 300)
    data: dict[str, Any] = {
        "title": title,
        "description": description,
        "deadline": deadline,
        "assignedTo": assigned_to,
    }
    if created_by is not None:
        data["createdBy"] = created_by
    return state.repo.create_task(data)


async def update_task(state: AppState, task_id: str, updates: dict[str, Any]) -> Task:
    await _delay(state, "write_delay_ms", 300)
    return state.repo.update_task(task_id, updates)


async def submit_task(state: AppState, task_id: str, attachment: dict[str, Any] | None = None) -> Task:
    # Submission was never delayed: the file upload itself is the slow part, and it is the caller's.
    return state.repo.submit_task(task_id, attachment or {})


async def send_message(state: AppState, sender_id: str, recipient_id: str, text: str) -> Conversation:
    return state.conversations.send_message(sender_id, recipient_id, text)


async def mark_read(state: AppState, conversation_id: str, reader_id: str) -> None:
    state.conversations.mark_conversation_read(conversation_id, reader_id)


async def unread_count(state: AppState, user_id: str) -> int:
    return state.conversations.get_unread_count_for_user(user_id)
