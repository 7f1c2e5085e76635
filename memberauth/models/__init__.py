from .session import Session
from .user import ROLES, IdentitySnapshot, Role, User, UserPublic

__all__ = ["ROLES", "IdentitySnapshot", "Role", "Session", "User", "UserPublic"]
