"""
Credential store: user records persisted in a JSON file.

Email is the unique key. The duplicate check and the append happen under one
lock (thread lock + lock file), so the store itself is the uniqueness
constraint and concurrent inserts for one email cannot both succeed.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from memberauth.core.locks import acquire_lock, lock_path_for
from memberauth.models.user import User
from memberauth.utils.exceptions import DuplicateAccountError, NotFoundError, StorageError
from memberauth.utils.logger import get_logger

from .jsonfile import atomic_write, read_json

logger = get_logger(__name__)


def _key(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """JSON-backed user storage"""

    def __init__(self, users_path: Path):
        self.users_path = Path(users_path)
        self._lock = threading.Lock()

    def _load(self) -> List[User]:
        raw = read_json(self.users_path)
        try:
            return [User(**item) for item in raw.get("users", [])]
        except (PydanticValidationError, TypeError) as e:
            raise StorageError(f"Invalid user record in {self.users_path}: {e}")

    def _save(self, users: List[User]) -> None:
        payload = {"users": [u.model_dump(mode="json") for u in users]}
        atomic_write(self.users_path, payload)

    def list_users(self) -> List[User]:
        """Load all users from storage"""
        return self._load()

    def count(self) -> int:
        return len(self._load())

    def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email (case-insensitive)"""
        key = _key(email)
        return next((u for u in self._load() if _key(u.email) == key), None)

    def insert(self, user: User) -> User:
        """Append a new user. Raises DuplicateAccountError if the email is taken."""
        key = _key(user.email)
        with self._lock, acquire_lock(lock_path_for(self.users_path)):
            users = self._load()
            if any(_key(u.email) == key for u in users):
                raise DuplicateAccountError()
            users.append(user)
            self._save(users)
        logger.info("User record created", email=user.email, role=user.role)
        return user

    def update_role(self, email: str, role: str) -> User:
        """Set the role of an existing user. Raises NotFoundError for unknown emails."""
        key = _key(email)
        with self._lock, acquire_lock(lock_path_for(self.users_path)):
            users = self._load()
            for i, u in enumerate(users):
                if _key(u.email) == key:
                    updated = u.model_copy(update={"role": role})
                    users[i] = updated
                    self._save(users)
                    break
            else:
                raise NotFoundError(f"No account for {email}")
        logger.info("User role updated", email=updated.email, role=role)
        return updated
