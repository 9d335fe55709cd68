"""
Session domain model for the authenticated tour booking user.

The in-memory Session is either absent (logged out) or fully populated.
StoredSession is the persisted form kept by a session store so the
in-memory copy can be rebuilt after a restart.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    """User roles issued by the sign-in endpoint."""

    ADMIN = "ADMIN"
    USER = "USER"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Map a raw role string to a Role; anything unrecognised is USER."""
        if value is not None and str(value).upper() == cls.ADMIN.value:
            return cls.ADMIN
        return cls.USER


@dataclass(frozen=True)
class Session:
    """
    Authenticated user identity held for the lifetime of the provider.

    Attributes:
        user_id: Identifier returned by the sign-in endpoint
        role: Role used for post-login routing
    """

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "role": self.role.value}


@dataclass
class StoredSession:
    """
    Persisted session record.

    Attributes:
        user_id: Value of the persisted ``userId`` storage key
        token: Value of the ``token`` cookie
        expires_at: UTC expiry of the token cookie
        role: Last known role, if it was persisted
    """

    user_id: str
    token: str
    expires_at: Optional[datetime]
    role: Optional[str] = None

    @classmethod
    def issue(
        cls, user_id: str, token: str, ttl_seconds: int, role: Optional[str] = None
    ) -> "StoredSession":
        """Create a record that expires ``ttl_seconds`` from now."""
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        return cls(user_id=user_id, token=token, expires_at=expires_at, role=role)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        current = now or datetime.now(timezone.utc)
        return current >= self.expires_at

