from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    user_id: int
    name: str
    username: str
    email: str
    password_hash: str
    role: Role
    profile_id: Optional[int] = None
    is_active: bool = True
    reset_token_hash: Optional[str] = None
    reset_token_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_json(self) -> dict:
        # Never expose the password hash or reset token.
        return {
            "user_id": self.user_id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "profile_id": self.profile_id,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class AuthSession:
    """A signed-in user together with the bearer token issued for it."""

    user: User
    token: str

    def to_json(self) -> dict:
        return {"token": self.token, "user": self.user.to_json()}
