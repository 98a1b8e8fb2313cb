# src/taskboard/entities/lifecycle.py

from __future__ import annotations

"""
Task status state machine.

    Pending <-> In Progress      (manager/admin via update_task)
    Pending | In Progress -> Completed | Late Submission   (assignee via submit_task)

Completed and Late Submission are terminal. This module is the only place
that decides status; the repository calls into it for every status change.
"""

import logging
from datetime import date, datetime, time

from ..errors import AlreadySubmitted, InvalidStatusTransition
from .models import TaskStatus

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.LATE_SUBMISSION})

_MANUAL_TRANSITIONS = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.PENDING}),
}


def is_terminal(status: TaskStatus) -> bool:
    return status in TERMINAL_STATUSES


def deadline_instant(deadline: str) -> datetime:
    """
    Parse a task deadline into an aware datetime.

    A bare calendar date means local midnight at the start of that day.
    A full ISO datetime is taken as-is (naive values are local time).
    """
    raw = (deadline or "").strip()
    if not raw:
        raise ValueError("deadline is empty")
    try:
        day = date.fromisoformat(raw)
    except ValueError:
        dt = datetime.fromisoformat(raw)
        return dt if dt.tzinfo is not None else dt.astimezone()
    return datetime.combine(day, time.min).astimezone()


def is_late(deadline: str, now: datetime) -> bool:
    """A task without a usable deadline is never late."""
    try:
        due = deadline_instant(deadline)
    except ValueError:
        logger.warning("Unparsable deadline %r; treating submission as on time.", deadline)
        return False
    return now > due


def status_after_submission(current: TaskStatus, *, late: bool) -> TaskStatus:
    if is_terminal(current):
        raise AlreadySubmitted()
    return TaskStatus.LATE_SUBMISSION if late else TaskStatus.COMPLETED


def check_manual_transition(current: TaskStatus, target: TaskStatus) -> TaskStatus:
    """Validate a status change requested through update_task; returns the target."""
    if target == current:
        return target
    if is_terminal(current):
        raise InvalidStatusTransition(f"Task is already {current.value}; status can no longer change")
    if target not in _MANUAL_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransition(
            f"Cannot move task from {current.value} to {target.value}; submit the task instead"
        )
    return target
