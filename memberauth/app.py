"""Application context: builds the stores and the auth service once per process."""

from datetime import timedelta
from pathlib import Path
from typing import Optional

from .auth.passwords import PasswordHasher
from .auth.service import AuthService
from .models.user import User
from .stores.session_store import SessionStore
from .stores.user_store import UserStore
from .utils.config import Settings, load_settings
from .utils.exceptions import DuplicateAccountError
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)

USERS_FILENAME = "users.json"
SESSIONS_FILENAME = "sessions.json"


class MemberAuthApp:
    """Owns the credential store, session store, hasher and AuthService"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        self.data_dir = Path(self.settings.storage.data_dir)
        self.hasher = PasswordHasher(rounds=self.settings.security.bcrypt_rounds)
        self.users = UserStore(self.data_dir / USERS_FILENAME)
        self.sessions = SessionStore(
            self.data_dir / SESSIONS_FILENAME,
            ttl=timedelta(minutes=self.settings.session.ttl_minutes),
            sliding=self.settings.session.sliding,
        )
        self.auth = AuthService(
            self.users,
            self.sessions,
            self.hasher,
            min_password_length=self.settings.security.min_password_length,
        )
        self.initialized = False

    def initialize(self) -> None:
        """Set up logging and storage, drop stale sessions, seed the first admin"""
        log = self.settings.logging
        setup_logger(
            log_level=log.level,
            log_format=log.format,
            file_path=log.file_path,
            max_bytes=log.max_bytes,
            backup_count=log.backup_count,
        )
        logger.info(
            "Initializing MemberAuth",
            environment=self.settings.app.environment,
            data_dir=str(self.data_dir),
        )
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.sessions.cleanup_expired()
        self._ensure_seed_admin()
        self.initialized = True

    def shutdown(self) -> None:
        logger.info("Shutting down MemberAuth")
        if self.initialized:
            self.sessions.cleanup_expired()
        self.initialized = False

    def _ensure_seed_admin(self) -> None:
        """Create the configured admin account if no users exist yet."""
        seed = self.settings.admin
        if not seed.email or not seed.password:
            return
        if self.users.count():
            return
        admin = User(
            name=seed.name,
            email=seed.email.strip().lower(),
            password_hash=self.hasher.hash(seed.password),
            role="admin",
        )
        try:
            self.users.insert(admin)
        except DuplicateAccountError:
            return
        logger.info("Seeded admin account", email=admin.email)
