"""
Authentication and authorization core.

- register / authenticate establish a session carrying an identity snapshot
- destroy_session ends it (idempotent)
- authorize is the single role gate used in front of every protected resource
- set_role lets an admin session promote or demote another account

Sessions snapshot name/email/role at login; later role changes only take
effect for that user after a fresh login.
"""

from __future__ import annotations

from typing import List, Optional

from memberauth.models.session import Session
from memberauth.models.user import User, UserPublic
from memberauth.stores.session_store import SessionStore
from memberauth.stores.user_store import UserStore
from memberauth.utils.exceptions import ForbiddenError, InvalidCredentialsError
from memberauth.utils.logger import get_logger

from .passwords import PasswordHasher
from .validation import (
    DEFAULT_MIN_PASSWORD_LENGTH,
    LoginForm,
    RoleChangeForm,
    SignupForm,
    validate,
)

logger = get_logger(__name__)

ADMIN_ROLE = "admin"


class AuthService:
    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        hasher: PasswordHasher,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ):
        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.min_password_length = min_password_length

    def register(self, name: str, email: str, password: str) -> Session:
        """
        Create a user with role "user" and log them in.

        Raises ValidationError for malformed input and DuplicateAccountError
        when the email is taken (decided by the store's insert).
        """
        form = validate(
            SignupForm,
            {"name": name, "email": email, "password": password},
            min_password_length=self.min_password_length,
        )
        user = User(
            name=form.name,
            email=str(form.email),
            password_hash=self.hasher.hash(form.password),
            role="user",
        )
        self.users.insert(user)
        session = self.sessions.create(user.snapshot())
        logger.info("User registered", email=user.email)
        return session

    def authenticate(self, email: str, password: str) -> Session:
        """
        Log in with email and password.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        form = validate(LoginForm, {"email": email, "password": password})
        user = self.users.find_by_email(str(form.email))
        if user is None:
            self.hasher.burn(form.password)
            logger.info("Login failed", reason="credentials")
            raise InvalidCredentialsError()
        if not self.hasher.verify(form.password, user.password_hash):
            logger.info("Login failed", reason="credentials")
            raise InvalidCredentialsError()

        session = self.sessions.create(user.snapshot())
        logger.info("User logged in", email=user.email, role=user.role)
        return session

    def get_session(self, session_id: Optional[str]) -> Optional[Session]:
        return self.sessions.get(session_id)

    def destroy_session(self, session_id: Optional[str]) -> None:
        """End a session. Missing or expired sessions are not an error."""
        self.sessions.destroy(session_id)

    @staticmethod
    def authorize(session: Optional[Session], required_role: Optional[str] = None) -> bool:
        """Allow iff a session exists and, when a role is required, its snapshot role matches."""
        if session is None:
            return False
        if required_role is None:
            return True
        return session.user.role == required_role

    def set_role(self, actor: Optional[Session], target_email: str, new_role: str) -> User:
        """
        Change another account's role. Only admin sessions may do this.

        Raises ForbiddenError, ValidationError or NotFoundError. Sessions
        already issued to the target keep their old role.
        """
        if not self.authorize(actor, ADMIN_ROLE):
            raise ForbiddenError("Admin role required")
        form = validate(RoleChangeForm, {"email": target_email, "role": new_role})
        updated = self.users.update_role(str(form.email), form.role)
        logger.info("Role changed", actor=actor.user.email, target=updated.email, role=updated.role)
        return updated

    def list_users(self) -> List[UserPublic]:
        return [u.public() for u in self.users.list_users()]
