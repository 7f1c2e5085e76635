"""User data models for authentication"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]
ROLES = ("user", "admin")


class User(BaseModel):
    """Durable user record (email is the unique key)"""
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    password_hash: str
    role: Role = "user"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def snapshot(self) -> "IdentitySnapshot":
        return IdentitySnapshot(name=self.name, email=self.email, role=self.role)

    def public(self) -> "UserPublic":
        return UserPublic(
            name=self.name,
            email=self.email,
            role=self.role,
            created_at=self.created_at.isoformat(),
        )


class IdentitySnapshot(BaseModel):
    """Identity copied into a session at login time. Not refreshed afterwards."""
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    role: Role = "user"


class UserPublic(BaseModel):
    """User view safe to render (no password hash)"""

    name: str
    email: str
    role: str
    created_at: str
