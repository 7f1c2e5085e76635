"""
Session store: opaque token -> session state, persisted in a JSON file.

Sessions expire after a fixed TTL from creation, or, with sliding=True, after
the TTL measured from the last successful lookup. Expired sessions are evicted
on lookup, whenever a session is created or destroyed, and by cleanup_expired().
"""

from __future__ import annotations

import secrets
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from memberauth.core.locks import acquire_lock, lock_path_for
from memberauth.models.session import Session
from memberauth.models.user import IdentitySnapshot
from memberauth.utils.logger import get_logger

from .jsonfile import atomic_write, read_json

logger = get_logger(__name__)


class SessionStore:
    """JSON-backed server-side session storage"""

    def __init__(
        self,
        sessions_path: Path,
        ttl: timedelta = timedelta(minutes=60),
        sliding: bool = False,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.sessions_path = Path(sessions_path)
        self.ttl = ttl
        self.sliding = sliding
        self._clock = clock
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Session]:
        raw = read_json(self.sessions_path)
        out: Dict[str, Session] = {}
        for token, data in (raw.get("sessions") or {}).items():
            try:
                out[token] = Session(**data)
            except (PydanticValidationError, TypeError):
                logger.warning("Dropping unreadable session record")
                continue
        return out

    def _save(self, sessions: Dict[str, Session]) -> None:
        payload = {
            "sessions": {token: s.model_dump(mode="json") for token, s in sessions.items()}
        }
        atomic_write(self.sessions_path, payload)

    @staticmethod
    def _prune(sessions: Dict[str, Session], now: datetime) -> int:
        """Drop expired sessions in place; returns how many were dropped."""
        expired = [token for token, s in sessions.items() if s.is_expired(now)]
        for token in expired:
            del sessions[token]
        return len(expired)

    def _locked(self):
        return acquire_lock(lock_path_for(self.sessions_path))

    def create(self, identity: IdentitySnapshot) -> Session:
        """Create a new session and return it; session_id is the opaque token."""
        now = self._clock()
        session = Session(
            session_id=secrets.token_urlsafe(32),
            user=identity,
            created_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock, self._locked():
            sessions = self._load()
            self._prune(sessions, now)
            sessions[session.session_id] = session
            self._save(sessions)
        logger.debug("Session created", email=identity.email)
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        """Return the live session for a token, or None."""
        if not session_id:
            return None
        with self._lock, self._locked():
            sessions = self._load()
            session = sessions.get(session_id)
            if session is None:
                return None
            now = self._clock()
            if session.is_expired(now):
                del sessions[session_id]
                self._save(sessions)
                logger.debug("Session expired", email=session.user.email)
                return None
            if self.sliding:
                session = session.model_copy(update={"expires_at": now + self.ttl})
                sessions[session_id] = session
                self._save(sessions)
            return session

    def destroy(self, session_id: Optional[str]) -> None:
        """Invalidate a session token (idempotent)."""
        if not session_id:
            return
        with self._lock, self._locked():
            sessions = self._load()
            removed = self._prune(sessions, self._clock())
            if sessions.pop(session_id, None) is not None or removed:
                self._save(sessions)

    def cleanup_expired(self) -> int:
        """Remove expired sessions; returns how many were removed."""
        with self._lock, self._locked():
            sessions = self._load()
            removed = self._prune(sessions, self._clock())
            if removed:
                self._save(sessions)
        if removed:
            logger.info("Expired sessions removed", count=removed)
        return removed
