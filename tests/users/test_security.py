from __future__ import annotations

import jwt
import pytest

from src.campus_admin.campus_admin.core.enums import Role
from src.campus_admin.campus_admin.core.exceptions import AuthenticationError
from src.campus_admin.campus_admin.users.security import (
    TokenIssuer,
    hash_password,
    hash_reset_token,
    new_reset_token,
    verify_password,
)


def test_issued_token_decodes_to_same_claims():
    issuer = TokenIssuer(secret="s3cret", expires_minutes=5)
    claims = issuer.decode(issuer.issue(user_id=42, role=Role.FACULTY))
    assert claims.user_id == 42
    assert claims.role == Role.FACULTY


def test_expired_token_is_rejected():
    issuer = TokenIssuer(secret="s3cret", expires_minutes=-1)
    with pytest.raises(AuthenticationError, match="expired"):
        issuer.decode(issuer.issue(user_id=1, role=Role.ADMIN))


def test_token_signed_with_other_secret_is_rejected():
    token = TokenIssuer(secret="other", expires_minutes=5).issue(user_id=1, role=Role.ADMIN)
    with pytest.raises(AuthenticationError):
        TokenIssuer(secret="s3cret", expires_minutes=5).decode(token)


def test_token_without_role_is_rejected():
    token = jwt.encode({"sub": "1"}, "s3cret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        TokenIssuer(secret="s3cret", expires_minutes=5).decode(token)


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password(hashed, "secret123")
    assert not verify_password(hashed, "secret124")
    assert not verify_password("not-a-hash", "secret123")


def test_reset_token_only_hash_is_kept():
    token, token_hash = new_reset_token()
    assert token != token_hash
    assert hash_reset_token(token) == token_hash
    assert len(token_hash) == 64
