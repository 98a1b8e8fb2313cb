# src/taskboard/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
import shlex
from collections.abc import Callable, Coroutine
from datetime import date
from typing import Any, TypeVar, cast

from .. import api
from ..core.state import AppState
from ..entities import queries
from ..entities.lifecycle import is_terminal
from ..entities.models import Task, TaskStatus, User, UserRole
from ..errors import NotFound, PermissionDenied, TaskboardError, friendly_error_message

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /login, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Arguments are shell-split, so quoted values may contain spaces.
        Domain errors are turned into their user-facing message.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except (TaskboardError, ValueError) as e:
            logger.info("/%s failed: %s", name, e)
            return friendly_error_message(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _resolve_user(state: AppState, ref: str) -> User:
    """Match a user by email, exact id, or unique id prefix."""
    users = state.repo.list_users()
    for u in users:
        if u.email == ref or u.id == ref:
            return u
    matches = [u for u in users if u.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    raise NotFound(f"No unique user matches {ref!r}")


def _resolve_task(state: AppState, ref: str) -> Task:
    tasks = state.repo.list_tasks()
    for t in tasks:
        if t.id == ref:
            return t
    matches = [t for t in tasks if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    raise NotFound(f"No unique task matches {ref!r}")


def _fmt_user(u: User) -> str:
    return f"{u.id[:8]}  {u.role.value:<8} {u.name} <{u.email}>"


def _fmt_task(t: Task, names: dict[str, str]) -> str:
    who = names.get(t.assigned_to or "", "Team")
    return f"{t.id[:8]}  [{t.status.value}] {t.title} (due {t.deadline}, {who})"


def _names(state: AppState) -> dict[str, str]:
    return {u.id: u.name for u in state.repo.list_users()}


_STAFF = (UserRole.ADMIN, UserRole.MANAGER)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/login <email> <password>"""
    if len(args) != 2:
        return "Usage: /login <email> <password>"
    if emit:
        emit("Signing in...")
    user = _run(api.authenticate(state, args[0], args[1]))
    return f"Welcome, {user.name} ({user.role.value})."


def cmd_logout(state: AppState, args: list[str]) -> str:
    state.session.logout()
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    user = state.session.current_user
    if user is None:
        return "Not logged in. Use /login <email> <password>."
    return _fmt_user(user)


def cmd_signup(state: AppState, args: list[str]) -> str:
    """/signup <name> <email> <password>  (employee self-signup, logs in)"""
    if len(args) != 3:
        return "Usage: /signup <name> <email> <password>"
    user = state.session.register({"name": args[0], "email": args[1], "password": args[2]})
    return f"Account created. Welcome, {user.name}."


def cmd_users(state: AppState, args: list[str]) -> str:
    """/users [admin|manager|employee]"""
    state.session.require_user()
    users = _run(api.list_users(state))
    if args:
        role = UserRole(args[0].lower())
        users = [u for u in users if u.role == role]
    if not users:
        return "No users."
    return "\n".join(_fmt_user(u) for u in users)


def cmd_manager(state: AppState, args: list[str]) -> str:
    """/manager <name> <email> <password>  (admin only)"""
    state.session.require_role(UserRole.ADMIN)
    if len(args) != 3:
        return "Usage: /manager <name> <email> <password>"
    user = _run(api.create_manager(state, name=args[0], email=args[1], password=args[2]))
    return f"Manager created: {_fmt_user(user)}"


def cmd_deluser(state: AppState, args: list[str]) -> str:
    """/deluser <user>  (admin only; tasks assigned to the user are kept)"""
    state.session.require_role(UserRole.ADMIN)
    if len(args) != 1:
        return "Usage: /deluser <user id or email>"
    user = _resolve_user(state, args[0])
    _run(api.delete_user(state, user.id))
    return f"Deleted {user.name}."


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks            -> my tasks (employees) or all tasks (staff)
    /tasks all        -> all tasks (staff)
    /tasks due <date> -> calendar view for one day
    """
    me = state.session.require_user()
    tasks = _run(api.list_tasks(state))

    if args and args[0].lower() == "due":
        if len(args) != 2:
            return "Usage: /tasks due YYYY-MM-DD"
        tasks = queries.tasks_due_on(tasks, date.fromisoformat(args[1]))

    if me.role not in _STAFF or (args and args[0].lower() == "mine"):
        tasks = [t for t in tasks if t.assigned_to == me.id]

    if not tasks:
        return "No tasks."
    names = _names(state)
    return "\n".join(_fmt_task(t, names) for t in tasks)


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task new <title> <description> <deadline> <assignee>
    /task show <task>
    """
    if not args:
        return "Usage: /task new <title> <description> <YYYY-MM-DD> <assignee> | /task show <task>"

    sub = args[0].lower()
    if sub == "new":
        me = state.session.require_role(*_STAFF)
        if len(args) != 5:
            return "Usage: /task new <title> <description> <YYYY-MM-DD> <assignee>"
        _, title, description, deadline, assignee_ref = args
        date.fromisoformat(deadline)
        assignee = _resolve_user(state, assignee_ref)
        task = _run(
            api.create_task(
                state,
                title=title,
                description=description,
                deadline=deadline,
                assigned_to=assignee.id,
                created_by=me.id,
            )
        )
        return f"Task created: {_fmt_task(task, _names(state))}"

    if sub == "show":
        me = state.session.require_user()
        if len(args) != 2:
            return "Usage: /task show <task>"
        task = _resolve_task(state, args[1])
        if me.role not in _STAFF and task.assigned_to != me.id:
            raise PermissionDenied("This task is not assigned to you")
        lines = [_fmt_task(task, _names(state)), f"  {task.description}"]
        for i, s in enumerate(task.submissions, start=1):
            late = " LATE" if s.is_late else ""
            lines.append(f"  submission {i}: {s.file_name or '(no file)'} at {s.submitted_at}{late}")
        return "\n".join(lines)

    return f"Unknown /task subcommand: {sub}"


def cmd_start(state: AppState, args: list[str]) -> str:
    """/start <task>  (staff: Pending -> In Progress)"""
    state.session.require_role(*_STAFF)
    if len(args) != 1:
        return "Usage: /start <task>"
    task = _resolve_task(state, args[0])
    task = _run(api.update_task(state, task.id, {"status": TaskStatus.IN_PROGRESS.value}))
    return f"Task is now {task.status.value}."


def cmd_submit(state: AppState, args: list[str]) -> str:
    """/submit <task> [file_name] [note]  (assignee only)"""
    me = state.session.require_user()
    if not args:
        return "Usage: /submit <task> [file_name] [note]"
    task = _resolve_task(state, args[0])
    if task.assigned_to != me.id:
        raise PermissionDenied("Only the assignee can submit this task")
    if is_terminal(task.status):
        return f"Task is already {task.status.value}."

    attachment: dict[str, Any] = {}
    if len(args) > 1:
        attachment["fileName"] = args[1]
    if len(args) > 2:
        attachment["note"] = " ".join(args[2:])
    task = _run(api.submit_task(state, task.id, attachment))
    return f"Submitted. Task is now {task.status.value}."


def cmd_send(state: AppState, args: list[str]) -> str:
    """/send <user> <text...>"""
    me = state.session.require_user()
    if len(args) < 2:
        return "Usage: /send <user id or email> <text>"
    other = _resolve_user(state, args[0])
    _run(api.send_message(state, me.id, other.id, " ".join(args[1:])))
    return f"Sent to {other.name}."


def cmd_inbox(state: AppState, args: list[str]) -> str:
    me = state.session.require_user()
    summaries = state.conversations.conversations_for_user(me.id)
    if not summaries:
        return "No conversations."
    names = _names(state)
    lines = []
    for s in summaries:
        who = names.get(s.other_user_id or "", s.other_user_id or "?")
        last = s.last_message
        preview = ""
        if last is not None:
            preview = f"You: {last.text}" if last.sender_id == me.id else last.text
        badge = f" ({s.unread_count} unread)" if s.unread_count else ""
        lines.append(f"{who}{badge}: {preview}")
    return "\n".join(lines)


def cmd_read(state: AppState, args: list[str]) -> str:
    """/read <user>  -> open the conversation and mark it read"""
    me = state.session.require_user()
    if len(args) != 1:
        return "Usage: /read <user id or email>"
    other = _resolve_user(state, args[0])
    conv = state.conversations.find_between(me.id, other.id)
    if conv is None or not conv.messages:
        return f"Start conversation with {other.name}."

    _run(api.mark_read(state, conv.id, me.id))
    lines = []
    for m in conv.messages:
        if m.sender_id == me.id:
            lines.append(f"[{m.time}] You: {m.text} {'✓✓' if m.read else '✓'}")
        else:
            lines.append(f"[{m.time}] {other.name}: {m.text}")
    return "\n".join(lines)


def cmd_unread(state: AppState, args: list[str]) -> str:
    me = state.session.require_user()
    return f"Unread messages: {_run(api.unread_count(state, me.id))}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    me = state.session.require_user()
    tasks = state.repo.list_tasks()
    if me.role not in _STAFF:
        tasks = [t for t in tasks if t.assigned_to == me.id]

    lines = [f"Tasks: {len(tasks)} (completed {queries.completed_count(tasks)})"]
    for status, n in queries.status_breakdown(tasks).items():
        lines.append(f"  {status.value}: {n}")

    if me.role in _STAFF:
        users = state.repo.list_users()
        roles = queries.role_counts(users)
        lines.append(f"Managers: {roles[UserRole.MANAGER]}  Employees: {roles[UserRole.EMPLOYEE]}")
        for w in queries.workload_by_assignee(tasks, users):
            lines.append(f"  {w.name}: {w.task_count} task(s)")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Sign in: /login <email> <password>.")
registry.register("logout", cmd_logout, help_text="Sign out.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
registry.register("signup", cmd_signup, help_text="Employee self-signup: /signup <name> <email> <password>.")
registry.register("users", cmd_users, help_text="List users: /users [role].")
registry.register("manager", cmd_manager, help_text="Admin: create a manager.")
registry.register("deluser", cmd_deluser, help_text="Admin: delete a user.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [all|mine|due YYYY-MM-DD].")
registry.register("task", cmd_task, help_text="Create or show a task: /task new ... | /task show <task>.")
registry.register("start", cmd_start, help_text="Staff: mark a task In Progress.")
registry.register("submit", cmd_submit, help_text="Submit your task: /submit <task> [file] [note].")
registry.register("send", cmd_send, help_text="Message a user: /send <user> <text>.")
registry.register("inbox", cmd_inbox, help_text="List your conversations.")
registry.register("read", cmd_read, help_text="Open a conversation: /read <user>.")
registry.register("unread", cmd_unread, help_text="Show your unread message count.")
registry.register("stats", cmd_stats, help_text="Task and team statistics.")
