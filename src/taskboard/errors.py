# src/taskboard/errors.py

"""
Caller-surfaced errors.

Every error here is recoverable: the operation that raised it left storage untouched,
and the message is safe to show to the end user as-is.
"""

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for all domain errors raised by the engine."""

    default_message = "Operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentials(TaskboardError):
    # Same text for unknown email and wrong password.
    default_message = "Invalid credentials"


class DuplicateEmail(TaskboardError):
    default_message = "Email already exists"


class NotFound(TaskboardError):
    default_message = "Not found"


class EmptyMessage(TaskboardError):
    default_message = "Message text is empty"


class AlreadySubmitted(TaskboardError):
    default_message = "Task has already been submitted"


class InvalidStatusTransition(TaskboardError):
    default_message = "Status change is not allowed"


class NotAuthenticated(TaskboardError):
    default_message = "Not logged in"


class PermissionDenied(TaskboardError):
    default_message = "Permission denied"


def friendly_error_message(err: Exception) -> str:
    """One-line text for the console; unknown errors get a generic message."""
    if isinstance(err, TaskboardError):
        return str(err).strip() or err.default_message
    if isinstance(err, ValueError):
        return f"Invalid input: {err}"
    return "Internal error."
