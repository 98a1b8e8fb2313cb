# src/taskboard/entities/repository.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from ..core.ports import ChangePublisher, Clock, Record, VersionedStore
from ..errors import DuplicateEmail, InvalidCredentials, NotFound, PermissionDenied
from ..storage.keys import StoreKeys
from . import lifecycle
from .models import Submission, Task, TaskStatus, User, UserRole, default_avatar, iso_utc

logger = logging.getLogger(__name__)

SEED_ADMIN_ID = "admin_1"

# Never taken from caller-supplied updates.
_IMMUTABLE_USER_FIELDS = frozenset({"id", "createdAt"})
_IMMUTABLE_TASK_FIELDS = frozenset({"id", "createdAt", "submissions"})

# Callers may use either the persisted camelCase names or snake_case.
_TASK_ALIASES = {"assigned_to": "assignedTo", "created_by": "createdBy"}
_SUBMISSION_ALIASES = {
    "file_name": "fileName",
    "file_size": "fileSize",
    "file_url": "fileUrl",
}


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


def _normalize(data: Mapping[str, Any], aliases: Mapping[str, str]) -> dict[str, Any]:
    return {aliases.get(k, k): v for k, v in data.items()}


class EntityRepository:
    """
    Users and Tasks over a keyed JSON store.

    Each mutation is a read-modify-write of ONE whole collection followed by a
    change publish. Nothing spans the two collections: deleting a user leaves
    tasks assigned to them untouched.

    Returned users never carry the credential field.
    """

    def __init__(
        self,
        store: VersionedStore,
        notifier: ChangePublisher | None = None,
        *,
        keys: StoreKeys | None = None,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._keys = keys or StoreKeys.with_prefix()
        self._clock = clock or _utc_now
        self._new_id = id_factory or _new_id

    @property
    def keys(self) -> StoreKeys:
        return self._keys

    # ---- low-level helpers ----

    def _commit(self, key: str, records: list[Record]) -> None:
        version = self._store.write(key, records)
        if self._notifier is not None:
            self._notifier.publish(key, version)

    def _load_users(self) -> list[User]:
        return [User.from_record(r) for r in self._store.read(self._keys.users)]

    def _save_users(self, users: list[User]) -> None:
        self._commit(self._keys.users, [u.to_record() for u in users])

    def _load_tasks(self) -> list[Task]:
        return [Task.from_record(r) for r in self._store.read(self._keys.tasks)]

    def _save_tasks(self, tasks: list[Task]) -> None:
        self._commit(self._keys.tasks, [t.to_record() for t in tasks])

    @staticmethod
    def _index_of(items: list[Any], item_id: str) -> int:
        for i, item in enumerate(items):
            if item.id == item_id:
                return i
        return -1

    # ---- seeding ----

    def ensure_seed_admin(
        self,
        *,
        email: str = "admin@admin.com",
        password: str = "admin",
        name: str = "System Admin",
    ) -> bool:
        """
        Add the seed admin unless an admin already exists. Returns True when it was added.

        The admin may have changed its email since it was seeded, so the check is
        by id and role; an existing account holding the email also blocks seeding.
        """
        users = self._load_users()
        if any(u.id == SEED_ADMIN_ID or u.role == UserRole.ADMIN or u.email == email for u in users):
            return False
        users.append(
            User(
                id=SEED_ADMIN_ID,
                name=name,
                email=email,
                role=UserRole.ADMIN,
                avatar="https://ui-avatars.com/api/?name=Admin&background=0D8ABC&color=fff",
                created_at=iso_utc(self._clock()),
                password=password,
            )
        )
        self._save_users(users)
        logger.info("Seeded admin user email=%s", email)
        return True

    # ---- users ----

    def login(self, email: str, password: str) -> User:
        for u in self._load_users():
            if u.email == email and u.password == password:
                logger.info("Login ok user_id=%s role=%s", u.id, u.role.value)
                return u.public()
        logger.info("Login failed")
        raise InvalidCredentials()

    def register(self, user_data: Mapping[str, Any]) -> User:
        """
        Create a user. Role defaults to employee; only the admin-issued path passes manager.
        There is exactly one admin, so registering another one is refused.
        """
        email = str(user_data.get("email") or "").strip()
        name = str(user_data.get("name") or "").strip()
        if not email:
            raise ValueError("email is required")

        role = UserRole(user_data.get("role") or UserRole.EMPLOYEE)
        if role == UserRole.ADMIN:
            raise PermissionDenied("Admin accounts cannot be registered")

        users = self._load_users()
        if any(u.email == email for u in users):
            raise DuplicateEmail()

        extra = {k: v for k, v in user_data.items() if k not in User._FIELDS}
        user = User(
            id=self._new_id(),
            name=name,
            email=email,
            role=role,
            avatar=str(user_data.get("avatar") or default_avatar(name)),
            created_at=iso_utc(self._clock()),
            password=user_data.get("password"),
            extra=extra,
        )
        users.append(user)
        self._save_users(users)
        logger.info("Registered user_id=%s role=%s", user.id, role.value)
        return user.public()

    def create_manager(self, user_data: Mapping[str, Any]) -> User:
        return self.register({**user_data, "role": UserRole.MANAGER.value})

    def list_users(self) -> list[User]:
        return [u.public() for u in self._load_users()]

    def get_user(self, user_id: str) -> User:
        for u in self._load_users():
            if u.id == user_id:
                return u.public()
        raise NotFound("User not found")

    def update_user(self, user_id: str, updates: Mapping[str, Any]) -> User:
        """Profile edit: shallow merge; id/createdAt are kept, email stays unique."""
        users = self._load_users()
        idx = self._index_of(users, user_id)
        if idx == -1:
            raise NotFound("User not found")

        current = users[idx]
        patch = {k: v for k, v in updates.items() if k not in _IMMUTABLE_USER_FIELDS}

        if "role" in patch and UserRole(patch["role"]) != current.role:
            if current.role == UserRole.ADMIN or UserRole(patch["role"]) == UserRole.ADMIN:
                raise PermissionDenied("The admin role cannot be granted or removed")

        new_email = patch.get("email")
        if new_email is not None and new_email != current.email:
            if any(u.email == new_email for u in users if u.id != user_id):
                raise DuplicateEmail()

        rec = current.to_record()
        rec.update(patch)
        users[idx] = User.from_record(rec)
        self._save_users(users)
        logger.debug("Updated user_id=%s fields=%s", user_id, sorted(patch))
        return users[idx].public()

    def delete_user(self, user_id: str) -> None:
        if user_id == SEED_ADMIN_ID:
            raise PermissionDenied("The system admin cannot be deleted")
        users = self._load_users()
        remaining = [u for u in users if u.id != user_id]
        if len(remaining) == len(users):
            raise NotFound("User not found")
        self._save_users(remaining)
        logger.info("Deleted user_id=%s", user_id)

    # ---- tasks ----

    def list_tasks(self) -> list[Task]:
        return self._load_tasks()

    def get_task(self, task_id: str) -> Task:
        for t in self._load_tasks():
            if t.id == task_id:
                return t
        raise NotFound("Task not found")

    def tasks_for_user(self, user_id: str) -> list[Task]:
        """Tasks assigned to user_id ("my tasks")."""
        return [t for t in self._load_tasks() if t.assigned_to == user_id]

    def create_task(self, task_data: Mapping[str, Any]) -> Task:
        """
        Create a Pending task with no submissions.

        title/description/deadline/assignedTo are a caller contract; they are
        not validated here. Unknown keys are kept on the record.
        """
        data = _normalize(task_data, _TASK_ALIASES)
        data.pop("status", None)
        data.pop("submissions", None)
        data.update(
            id=self._new_id(),
            status=TaskStatus.PENDING.value,
            submissions=[],
            createdAt=iso_utc(self._clock()),
        )
        task = Task.from_record(data)

        tasks = self._load_tasks()
        tasks.append(task)
        self._save_tasks(tasks)
        logger.info("Task created id=%s assigned_to=%s deadline=%s", task.id, task.assigned_to, task.deadline)
        return task

    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task:
        """Shallow-merge updates; a status change goes through the state machine."""
        tasks = self._load_tasks()
        idx = self._index_of(tasks, task_id)
        if idx == -1:
            raise NotFound("Task not found")

        current = tasks[idx]
        patch = _normalize(updates, _TASK_ALIASES)
        ignored = sorted(k for k in patch if k in _IMMUTABLE_TASK_FIELDS)
        if ignored:
            logger.warning("update_task id=%s ignoring immutable fields %s", task_id, ignored)
            patch = {k: v for k, v in patch.items() if k not in _IMMUTABLE_TASK_FIELDS}

        if "status" in patch:
            target = TaskStatus(patch["status"])
            patch["status"] = lifecycle.check_manual_transition(current.status, target).value

        rec = current.to_record()
        rec.update(patch)
        tasks[idx] = Task.from_record(rec)
        self._save_tasks(tasks)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(patch))
        return tasks[idx]

    def submit_task(self, task_id: str, submission_data: Mapping[str, Any] | None = None) -> Task:
        """
        Record the assignee's submission.

        Lateness is decided once, now, against the deadline; the status moves to
        Completed or Late Submission in the same write as the append. A task in
        a terminal status rejects further submissions.
        """
        tasks = self._load_tasks()
        idx = self._index_of(tasks, task_id)
        if idx == -1:
            raise NotFound("Task not found")

        task = tasks[idx]
        now = self._clock()
        late = lifecycle.is_late(task.deadline, now)
        new_status = lifecycle.status_after_submission(task.status, late=late)

        data = _normalize(submission_data or {}, _SUBMISSION_ALIASES)
        data.update(id=self._new_id(), submittedAt=iso_utc(now), isLate=late)
        submission = Submission.from_record(data)

        task.submissions.append(submission)
        task.status = new_status
        self._save_tasks(tasks)
        logger.info("Task submitted id=%s status=%s late=%s", task_id, new_status.value, late)
        return task
