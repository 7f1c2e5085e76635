"""Custom exceptions for the MemberAuth system"""

from typing import Optional


class MemberAuthError(Exception):
    """Base exception for MemberAuth"""

    status_code = 500


class ValidationError(MemberAuthError):
    """Malformed request input (user-correctable)"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class DuplicateAccountError(MemberAuthError):
    """An account with this email already exists"""

    status_code = 400

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)


class InvalidCredentialsError(MemberAuthError):
    """Login failed. Never says whether the email or the password was wrong."""

    status_code = 401
    MESSAGE = "Invalid email/password combination"

    def __init__(self):
        super().__init__(self.MESSAGE)


class AuthenticationRequired(MemberAuthError):
    """No live session for a gated resource"""

    status_code = 303

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ForbiddenError(MemberAuthError):
    """Authenticated, but the session role is not allowed"""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(MemberAuthError):
    """Target record does not exist"""

    status_code = 404


class StorageError(MemberAuthError):
    """Credential or session store could not be read or written"""
    pass


class ConfigError(MemberAuthError):
    """Configuration error"""
    pass
