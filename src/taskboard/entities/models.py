# src/taskboard/entities/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from urllib.parse import quote


class UserRole(StrEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @classmethod
    def from_db(cls, raw: str | None) -> UserRole:
        if not raw:
            return cls.EMPLOYEE
        try:
            return cls(raw)
        except ValueError:
            return cls.EMPLOYEE


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Persisted values are the display strings the dashboards always used.
    COMPLETED and LATE_SUBMISSION are terminal (see lifecycle.py).
    """

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    LATE_SUBMISSION = "Late Submission"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


def iso_utc(dt: datetime) -> str:
    """2026-01-31T09:15:00.000Z"""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_avatar(name: str) -> str:
    return (
        f"https://ui-avatars.com/api/?name={quote(name or 'User')}"
        "&background=random&color=fff&size=128"
    )


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str
    role: UserRole
    avatar: str
    created_at: str | None = None
    password: str | None = None  # opaque credential, stored as given
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("id", "name", "email", "role", "avatar", "createdAt", "password")

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> User:
        name = str(rec.get("name") or "")
        return cls(
            id=str(rec.get("id") or ""),
            name=name,
            email=str(rec.get("email") or ""),
            role=UserRole.from_db(rec.get("role")),
            avatar=str(rec.get("avatar") or default_avatar(name)),
            created_at=rec.get("createdAt"),
            password=rec.get("password"),
            extra={k: v for k, v in rec.items() if k not in cls._FIELDS},
        )

    def to_record(self, *, include_password: bool = True) -> dict[str, Any]:
        rec: dict[str, Any] = dict(self.extra)
        rec.update(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role.value,
            avatar=self.avatar,
        )
        if self.created_at is not None:
            rec["createdAt"] = self.created_at
        if include_password and self.password is not None:
            rec["password"] = self.password
        return rec

    def public(self) -> User:
        """Copy with the credential stripped; this is what leaves the repository."""
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            avatar=self.avatar,
            created_at=self.created_at,
            password=None,
            extra=dict(self.extra),
        )


@dataclass(slots=True, frozen=True)
class Submission:
    id: str
    submitted_at: str
    is_late: bool
    file_name: str | None = None
    file_size: int | None = None
    file_url: str | None = None
    note: str | None = None

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Submission:
        size = rec.get("fileSize")
        return cls(
            id=str(rec.get("id") or ""),
            submitted_at=str(rec.get("submittedAt") or ""),
            is_late=bool(rec.get("isLate", False)),
            file_name=rec.get("fileName"),
            file_size=int(size) if isinstance(size, (int, float)) else None,
            file_url=rec.get("fileUrl"),
            note=rec.get("note"),
        )

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "id": self.id,
            "submittedAt": self.submitted_at,
            "isLate": self.is_late,
        }
        for key, value in (
            ("fileName", self.file_name),
            ("fileSize", self.file_size),
            ("fileUrl", self.file_url),
            ("note", self.note),
        ):
            if value is not None:
                rec[key] = value
        return rec


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    deadline: str
    assigned_to: str | None
    status: TaskStatus
    submissions: list[Submission]
    created_at: str | None = None
    created_by: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "id",
        "title",
        "description",
        "deadline",
        "assignedTo",
        "status",
        "submissions",
        "createdAt",
        "createdBy",
    )

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Task:
        subs_raw = rec.get("submissions")
        subs = [Submission.from_record(s) for s in subs_raw if isinstance(s, dict)] if isinstance(subs_raw, list) else []
        return cls(
            id=str(rec.get("id") or ""),
            title=str(rec.get("title") or ""),
            description=str(rec.get("description") or ""),
            deadline=str(rec.get("deadline") or ""),
            assigned_to=rec.get("assignedTo"),
            status=TaskStatus.from_db(rec.get("status")),
            submissions=subs,
            created_at=rec.get("createdAt"),
            created_by=rec.get("createdBy"),
            extra={k: v for k, v in rec.items() if k not in cls._FIELDS},
        )

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = dict(self.extra)
        rec.update(
            id=self.id,
            title=self.title,
            description=self.description,
            deadline=self.deadline,
            assignedTo=self.assigned_to,
            status=self.status.value,
            submissions=[s.to_record() for s in self.submissions],
        )
        if self.created_at is not None:
            rec["createdAt"] = self.created_at
        if self.created_by is not None:
            rec["createdBy"] = self.created_by
        return rec

    @property
    def last_submission(self) -> Submission | None:
        return self.submissions[-1] if self.submissions else None
