from __future__ import annotations

import pytest

from fakes import ADMIN, as_faculty
from src.campus_admin.campus_admin.common.pagination import PageRequest
from src.campus_admin.campus_admin.core.enums import Role
from src.campus_admin.campus_admin.core.exceptions import AuthorizationError, ConflictError, ValidationError


def _create(container, **overrides):
    data = {"name": "Linus", "email": "linus@campus.test", "password": "secret123", "role": "faculty"}
    data.update(overrides)
    return container.user_service.create_user(requester=ADMIN, data=data)


def test_admin_creates_and_lists_users_by_role(container):
    _create(container)
    _create(container, name="Ken", email="ken@campus.test", role="student")

    page = container.user_service.list_users(requester=ADMIN, page=PageRequest(), role=Role.FACULTY)
    assert [u.username for u in page.items] == ["linus"]
    assert "password_hash" not in page.items[0].to_json()


def test_non_admin_cannot_manage_users(container):
    with pytest.raises(AuthorizationError):
        container.user_service.list_users(requester=as_faculty(1), page=PageRequest())


def test_duplicate_username_is_conflict(container):
    _create(container)
    with pytest.raises(ConflictError):
        _create(container, email="linus2@campus.test", username="linus")


def test_update_can_deactivate_and_change_role(container):
    user = _create(container)
    updated = container.user_service.update_user(
        requester=ADMIN, user_id=user.user_id, data={"is_active": False, "role": "admin"}
    )
    assert updated.is_active is False
    assert updated.role == Role.ADMIN


def test_admin_cannot_delete_self(container):
    with pytest.raises(ValidationError):
        container.user_service.delete_user(requester=ADMIN, user_id=ADMIN.user_id)
