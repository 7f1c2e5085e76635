"""Password hashing with bcrypt (slow, salted)."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 12
# bcrypt only reads the first 72 bytes; newer releases raise instead of truncating
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


class PasswordHasher:
    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, password: str) -> None:
        """Spend one verification's worth of work (used when no hash exists)."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("memberauth-dummy-password")
        self.verify(password, self._dummy_hash)
