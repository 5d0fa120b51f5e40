from __future__ import annotations

from datetime import datetime

import pytest

from fakes import RecordingMailer, StaticHealth, in_memory_repositories
from src.campus_admin.campus_admin.container import assemble
from src.campus_admin.campus_admin.core.enums import Role
from src.campus_admin.campus_admin.main import create_app
from src.campus_admin.campus_admin.users.model import User
from src.campus_admin.campus_admin.users.security import TokenIssuer, hash_password


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 1, 10, 0, 0)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def repos():
    return in_memory_repositories(lock_timeout=2.0)


@pytest.fixture
def tokens():
    return TokenIssuer(secret="test-secret", expires_minutes=60)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def health():
    return StaticHealth()


@pytest.fixture
def container(repos, tokens, mailer, health, clock):
    return assemble(repos, health=health, tokens=tokens, mailer=mailer, clock=clock)


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(repos, tokens):
    """Create an account and return ``(user_id, headers)`` for it."""

    def _login(role: Role, *, profile_id=None, username=None):
        username = username or f"{role.value}{profile_id or ''}"
        user_id = repos.users.add(
            User(
                user_id=0,
                name=username.title(),
                username=username,
                email=f"{username}@campus.test",
                password_hash=hash_password("secret123"),
                role=role,
                profile_id=profile_id,
            )
        )
        token = tokens.issue(user_id=user_id, role=role)
        return user_id, {"Authorization": f"Bearer {token}"}

    return _login
