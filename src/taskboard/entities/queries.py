# src/taskboard/entities/queries.py

"""Read-only aggregates the dashboards show (cards, pie chart, calendar, workload bars)."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .lifecycle import TERMINAL_STATUSES
from .models import Task, TaskStatus, User, UserRole


@dataclass(slots=True, frozen=True)
class Workload:
    user_id: str
    name: str
    task_count: int


def status_breakdown(tasks: Iterable[Task]) -> dict[TaskStatus, int]:
    """Count per status; every status is present, zero included."""
    counts = Counter(t.status for t in tasks)
    return {s: counts.get(s, 0) for s in TaskStatus}


def completed_count(tasks: Iterable[Task]) -> int:
    """Late submissions count as completed work."""
    return sum(1 for t in tasks if t.status in TERMINAL_STATUSES)


def role_counts(users: Iterable[User]) -> dict[UserRole, int]:
    counts = Counter(u.role for u in users)
    return {r: counts.get(r, 0) for r in UserRole}


def tasks_due_on(tasks: Iterable[Task], day: date) -> list[Task]:
    key = day.isoformat()
    return [t for t in tasks if (t.deadline or "")[:10] == key]


def workload_by_assignee(tasks: Iterable[Task], users: Iterable[User]) -> list[Workload]:
    """Employees with at least one assigned task, busiest first."""
    per_user = Counter(t.assigned_to for t in tasks if t.assigned_to)
    out = [
        Workload(user_id=u.id, name=u.name, task_count=per_user[u.id])
        for u in users
        if u.role == UserRole.EMPLOYEE and per_user.get(u.id, 0) > 0
    ]
    out.sort(key=lambda w: (-w.task_count, w.name))
    return out
