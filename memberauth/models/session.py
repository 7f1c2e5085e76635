"""Server-side session record"""

from datetime import datetime

from pydantic import BaseModel

from .user import IdentitySnapshot


class Session(BaseModel):
    """Session state keyed by an opaque token; the token is the only value the client holds."""

    session_id: str
    user: IdentitySnapshot
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
