from __future__ import annotations

import pytest

from fakes import ADMIN, as_faculty, as_student, seed_course, seed_faculty
from src.campus_admin.campus_admin.common.pagination import PageRequest
from src.campus_admin.campus_admin.core.enums import Designation, FacultyStatus
from src.campus_admin.campus_admin.core.exceptions import AuthorizationError, ConflictError, ValidationError


def _payload(**overrides):
    data = {
        "name": "Dr Hopper",
        "email": "hopper@campus.test",
        "faculty_code": "FAC-01",
        "department": "CS",
        "designation": "Professor",
        "qualifications": [{"degree": "PhD", "institution": "Yale", "year": 1934}],
        "workload": {"teaching_hours": 10, "research_hours": 6},
    }
    data.update(overrides)
    return data


def test_create_faculty_with_workload(container):
    member = container.faculty_service.create_faculty(requester=ADMIN, data=_payload())
    assert member.designation == Designation.PROFESSOR
    assert member.workload.total_hours == 16
    assert member.qualifications[0].degree == "PhD"


def test_email_and_code_are_unique(container):
    container.faculty_service.create_faculty(requester=ADMIN, data=_payload())
    with pytest.raises(ConflictError):
        container.faculty_service.create_faculty(requester=ADMIN, data=_payload(faculty_code="FAC-02"))
    with pytest.raises(ConflictError):
        container.faculty_service.create_faculty(requester=ADMIN, data=_payload(email="other@campus.test"))


def test_workload_hours_cannot_be_negative(repos, container):
    fid = seed_faculty(repos, "W1")
    with pytest.raises(ValidationError):
        container.faculty_service.update_workload(requester=ADMIN, faculty_id=fid, data={"teaching_hours": -2})
    updated = container.faculty_service.update_workload(requester=ADMIN, faculty_id=fid, data={"teaching_hours": 12})
    assert updated.workload.teaching_hours == 12


def test_faculty_reads_own_profile_only(repos, container):
    mine, theirs = seed_faculty(repos, "W2"), seed_faculty(repos, "W3")
    assert container.faculty_service.my_profile(requester=as_faculty(mine)).faculty_id == mine
    with pytest.raises(AuthorizationError):
        container.faculty_service.get_faculty(requester=as_faculty(mine), faculty_id=theirs)
    with pytest.raises(AuthorizationError):
        container.faculty_service.list_faculty(requester=as_student(1), page=PageRequest())


def test_cannot_delete_faculty_assigned_to_courses(repos, container):
    fid = seed_faculty(repos, "W4")
    seed_course(repos, "FC100", faculty_id=fid)
    with pytest.raises(ConflictError):
        container.faculty_service.delete_faculty(requester=ADMIN, faculty_id=fid)


def test_status_and_department_filter(repos, container):
    a = seed_faculty(repos, "W5", department="CS")
    seed_faculty(repos, "W6", department="EE")
    container.faculty_service.set_status(requester=ADMIN, faculty_id=a, status="Sabbatical")

    page = container.faculty_service.list_faculty(
        requester=ADMIN, page=PageRequest(), department="CS", status=FacultyStatus.SABBATICAL
    )
    assert [f.faculty_id for f in page.items] == [a]
