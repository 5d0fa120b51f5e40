from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError

JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        return False


def new_reset_token() -> tuple[str, str]:
    """Return ``(token, token_hash)``. Only the hash is stored."""
    token = secrets.token_hex(20)
    return token, hash_reset_token(token)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: Role


@dataclass(frozen=True)
class TokenIssuer:
    secret: str
    expires_minutes: int

    def issue(self, *, user_id: int, role: Role) -> str:
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "role": role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self.expires_minutes)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc
        try:
            return TokenClaims(user_id=int(payload["sub"]), role=Role(payload["role"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthenticationError("Invalid token payload") from exc
