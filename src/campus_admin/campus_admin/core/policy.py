"""Capability checks.

Every service operation calls :func:`authorize` exactly once. A rule grants a
capability to some roles outright and to other roles only when the requester's
linked profile (student or faculty record) is one of the resource owners.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Requester:
    user_id: int
    role: Role
    profile_id: Optional[int] = None


@dataclass(frozen=True)
class Rule:
    roles: frozenset = frozenset()
    owner_roles: frozenset = frozenset()


ADMIN = frozenset({Role.ADMIN})
STAFF = frozenset({Role.ADMIN, Role.FACULTY})
EVERYONE = frozenset(Role)
FACULTY = frozenset({Role.FACULTY})
STUDENT = frozenset({Role.STUDENT})
MEMBERS = frozenset({Role.FACULTY, Role.STUDENT})


RULES: dict[tuple[str, str], Rule] = {
    ("user", "list"): Rule(ADMIN),
    ("user", "read"): Rule(ADMIN),
    ("user", "write"): Rule(ADMIN),
    ("student", "list"): Rule(STAFF),
    ("student", "read"): Rule(STAFF, STUDENT),
    ("student", "write"): Rule(ADMIN),
    ("student", "courses"): Rule(STAFF, STUDENT),
    ("faculty", "list"): Rule(STAFF),
    ("faculty", "read"): Rule(ADMIN, FACULTY),
    ("faculty", "write"): Rule(ADMIN),
    ("faculty", "courses"): Rule(STAFF, FACULTY),
    ("course", "read"): Rule(EVERYONE),
    ("course", "write"): Rule(ADMIN),
    ("course", "roster"): Rule(ADMIN, FACULTY),
    ("enrollment", "enroll"): Rule(ADMIN, STUDENT),
    ("enrollment", "withdraw"): Rule(ADMIN, STUDENT),
    ("attendance", "list"): Rule(STAFF),
    ("attendance", "read"): Rule(ADMIN, MEMBERS),
    ("attendance", "write"): Rule(ADMIN, FACULTY),
    ("attendance", "delete"): Rule(ADMIN),
    ("attendance", "student"): Rule(STAFF, STUDENT),
    ("attendance", "course"): Rule(ADMIN, FACULTY),
    ("attendance", "date"): Rule(STAFF, STUDENT),
    ("assignment", "read"): Rule(EVERYONE),
    ("assignment", "write"): Rule(ADMIN, FACULTY),
    ("grade", "record"): Rule(ADMIN, FACULTY),
    ("grade", "update"): Rule(ADMIN, FACULTY),
    ("grade", "delete"): Rule(ADMIN),
    ("grade", "read"): Rule(ADMIN, MEMBERS),
    ("grade", "student"): Rule(STAFF, STUDENT),
    ("grade", "assignment"): Rule(ADMIN, FACULTY),
    ("grade", "course"): Rule(ADMIN, FACULTY),
    ("submission", "create"): Rule(STUDENT),
    ("submission", "update"): Rule(frozenset(), STUDENT),
    ("submission", "read"): Rule(ADMIN, MEMBERS),
    ("submission", "list"): Rule(EVERYONE),
    ("submission", "list_all"): Rule(ADMIN),
    ("submission", "delete"): Rule(ADMIN),
    ("submission", "grade"): Rule(ADMIN, FACULTY),
    ("announcement", "read"): Rule(EVERYONE),
    ("announcement", "create"): Rule(ADMIN, FACULTY),
    ("announcement", "write"): Rule(ADMIN, FACULTY),
    ("announcement", "course"): Rule(ADMIN, MEMBERS),
    ("department", "read"): Rule(EVERYONE),
    ("department", "write"): Rule(ADMIN),
    ("academic_year", "read"): Rule(EVERYONE),
    ("academic_year", "write"): Rule(ADMIN),
}


def is_allowed(requester: Requester, resource: str, action: str, *, owners: Iterable[Optional[int]] = ()) -> bool:
    rule = RULES.get((resource, action))
    if rule is None:
        return False
    if requester.role in rule.roles:
        return True
    if requester.role in rule.owner_roles and requester.profile_id is not None:
        return requester.profile_id in {o for o in owners if o is not None}
    return False


def authorize(requester: Requester, resource: str, action: str, *, owners: Iterable[Optional[int]] = ()) -> None:
    if not is_allowed(requester, resource, action, owners=owners):
        raise AuthorizationError(f"Role '{requester.role.value}' is not authorized to {action} {resource}")
