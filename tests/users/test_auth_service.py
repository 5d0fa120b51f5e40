from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from fakes import seed_faculty, seed_student
from src.campus_admin.campus_admin.container import assemble
from src.campus_admin.campus_admin.core.enums import Role
from src.campus_admin.campus_admin.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.campus_admin.campus_admin.core.policy import Requester


def _register(auth, **overrides):
    data = {"name": "Ada", "email": "Ada@Campus.test", "password": "secret123"}
    data.update(overrides)
    return auth.register(data=data)


def test_register_then_login_by_email_or_username(container):
    auth = container.auth_service
    session = _register(auth)
    assert session.user.email == "ada@campus.test"
    assert session.user.username == "ada"
    assert session.user.role == Role.STUDENT

    assert auth.login(identifier="ADA@campus.test", password="secret123").user.user_id == session.user.user_id
    assert auth.login(identifier="ada", password="secret123").user.user_id == session.user.user_id
    with pytest.raises(AuthenticationError):
        auth.login(identifier="ada", password="wrong-pass")


def test_admin_cannot_self_register(container):
    with pytest.raises(ValidationError):
        _register(container.auth_service, role="admin")


def test_duplicate_email_is_conflict(container):
    _register(container.auth_service)
    with pytest.raises(ConflictError):
        _register(container.auth_service, username="ada2")


def test_resolve_reads_current_role_and_profile(container, repos):
    session = _register(container.auth_service)
    requester = container.auth_service.resolve(session.token)
    assert requester == Requester(user_id=session.user.user_id, role=Role.STUDENT, profile_id=None)

    repos.users.update(replace(repos.users.get_by_id(session.user.user_id), is_active=False))
    with pytest.raises(AuthenticationError):
        container.auth_service.resolve(session.token)


def test_register_student_creates_linked_profile(container, repos):
    session = container.auth_service.register_student(
        data={
            "name": "Grace",
            "email": "grace@campus.test",
            "password": "secret123",
            "roll_number": "CS-2024-01",
            "department": "CS",
        }
    )
    student = repos.students.get(session.user.profile_id)
    assert student.roll_number == "CS-2024-01"
    assert student.user_id == session.user.user_id


def test_link_profile_rejects_taken_profile(container, repos):
    sid = seed_student(repos, "LP1")
    first = _register(container.auth_service)
    second = _register(container.auth_service, email="bob@campus.test", name="Bob")

    as_first = container.auth_service.resolve(first.token)
    assert container.auth_service.link_profile(requester=as_first, profile_id=sid).profile_id == sid

    as_second = container.auth_service.resolve(second.token)
    with pytest.raises(ConflictError):
        container.auth_service.link_profile(requester=as_second, profile_id=sid)


def test_faculty_account_links_faculty_profile(container, repos):
    fid = seed_faculty(repos, "LP2")
    session = _register(container.auth_service, role="faculty")
    user = container.auth_service.link_profile(requester=container.auth_service.resolve(session.token), profile_id=fid)
    assert user.profile_id == fid
    assert repos.faculty.get(fid).user_id == user.user_id


def test_password_reset_flow(container, mailer):
    auth = container.auth_service
    _register(auth)

    assert auth.forgot_password(email="ada@campus.test", reset_url="http://localhost/api/auth/resetpassword/") is True
    recipient, _, body = mailer.sent[-1]
    assert recipient == "ada@campus.test"
    token = body.split("resetpassword/")[1].split()[0]

    session = auth.reset_password(token=token, password="newsecret")
    assert auth.login(identifier="ada", password="newsecret").user.user_id == session.user.user_id
    with pytest.raises(ValidationError):
        auth.reset_password(token=token, password="another1")


def test_expired_reset_token_is_rejected(repos, tokens, mailer, health, fixed_now):
    moments = [fixed_now]
    container = assemble(repos, health=health, tokens=tokens, mailer=mailer, clock=lambda: moments[-1])
    auth = container.auth_service
    _register(auth)
    auth.forgot_password(email="ada@campus.test", reset_url="http://x/reset")
    token = mailer.sent[-1][2].split("reset/")[1].split()[0]

    moments.append(fixed_now + timedelta(minutes=11))
    with pytest.raises(ValidationError):
        auth.reset_password(token=token, password="newsecret")


def test_mail_failure_degrades_but_keeps_token(container, repos, mailer):
    _register(container.auth_service)
    mailer.fail = True
    assert container.auth_service.forgot_password(email="ada@campus.test", reset_url="http://x/reset") is False
    assert repos.users.get_by_email("ada@campus.test").reset_token_hash is not None


def test_forgot_password_for_unknown_email(container):
    with pytest.raises(NotFoundError):
        container.auth_service.forgot_password(email="nobody@campus.test", reset_url="http://x/reset")


def test_update_password_requires_current(container):
    session = _register(container.auth_service)
    requester = container.auth_service.resolve(session.token)
    with pytest.raises(AuthenticationError):
        container.auth_service.update_password(requester=requester, current_password="nope", new_password="newsecret")
    container.auth_service.update_password(requester=requester, current_password="secret123", new_password="newsecret")
    container.auth_service.login(identifier="ada", password="newsecret")
