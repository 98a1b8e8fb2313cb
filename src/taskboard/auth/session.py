# src/taskboard/auth/session.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.ports import VersionedStore
from ..entities.models import Task, User, UserRole
from ..entities.repository import EntityRepository
from ..errors import NotAuthenticated, NotFound, PermissionDenied

logger = logging.getLogger(__name__)


class SessionGate:
    """
    Current-user session on top of EntityRepository.

    The logged-in (credential-free) user is persisted in the store, so a new
    process on the same store file starts already logged in.
    """

    def __init__(self, repo: EntityRepository, store: VersionedStore) -> None:
        self._repo = repo
        self._store = store
        self._key = repo.keys.current_user
        self._user: User | None = self._restore()

    def _restore(self) -> User | None:
        rec = self._store.read_value(self._key)
        if not rec:
            return None
        user_id = str(rec.get("id") or "")
        if not user_id:
            return None
        try:
            user = self._repo.get_user(user_id)
        except NotFound:
            logger.info("Persisted session user_id=%s no longer exists; dropping it.", user_id)
            self._store.delete(self._key)
            return None
        logger.info("Session restored user_id=%s", user.id)
        return user

    def _refresh(self) -> User | None:
        """Re-read the logged-in user so deletes and profile edits take effect."""
        if self._user is None:
            return None
        try:
            self._user = self._repo.get_user(self._user.id)
        except NotFound:
            logger.info("Session user_id=%s was deleted; logging out.", self._user.id)
            self.logout()
        return self._user

    def _remember(self, user: User) -> None:
        self._user = user
        self._store.write_value(self._key, user.to_record(include_password=False))

    @property
    def current_user(self) -> User | None:
        return self._refresh()

    def login(self, email: str, password: str) -> User:
        user = self._repo.login(email, password)
        self._remember(user)
        return user

    def register(self, user_data: Mapping[str, Any]) -> User:
        """Self-signup: always an employee, logged in right away."""
        user = self._repo.register({**user_data, "role": UserRole.EMPLOYEE.value})
        self._remember(user)
        return user

    def logout(self) -> None:
        if self._user is not None:
            logger.info("Logout user_id=%s", self._user.id)
        self._user = None
        self._store.delete(self._key)

    def require_user(self) -> User:
        user = self._refresh()
        if user is None:
            raise NotAuthenticated()
        return user

    def require_role(self, *roles: UserRole) -> User:
        user = self.require_user()
        if roles and user.role not in roles:
            raise PermissionDenied(f"Requires role: {', '.join(r.value for r in roles)}")
        return user

    def my_tasks(self) -> list[Task]:
        return self._repo.tasks_for_user(self.require_user().id)
