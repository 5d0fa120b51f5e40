from __future__ import annotations

import pytest

from fakes import ADMIN, as_faculty, as_student, seed_course, seed_student
from src.campus_admin.campus_admin.common.pagination import PageRequest
from src.campus_admin.campus_admin.core.constants import NOT_GRADED
from src.campus_admin.campus_admin.core.enums import EnrollmentStatus, Role, StudentStatus
from src.campus_admin.campus_admin.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.campus_admin.campus_admin.core.policy import Requester


def test_create_student_and_reject_duplicate_roll_number(container):
    data = {"name": "Alan", "roll_number": "R-1", "department": "CS", "email": "Alan@Campus.test"}
    student = container.student_service.create_student(requester=ADMIN, data=data)
    assert student.email == "alan@campus.test"
    assert student.status == StudentStatus.ACTIVE
    with pytest.raises(ConflictError):
        container.student_service.create_student(requester=ADMIN, data=data)


def test_invalid_status_is_rejected(repos, container):
    sid = seed_student(repos, "R-2")
    with pytest.raises(ValidationError):
        container.student_service.set_status(requester=ADMIN, student_id=sid, status="Expelled")
    updated = container.student_service.set_status(requester=ADMIN, student_id=sid, status="On Leave")
    assert updated.status == StudentStatus.ON_LEAVE


def test_student_reads_only_own_record(repos, container):
    mine, theirs = seed_student(repos, "R-3"), seed_student(repos, "R-4")
    assert container.student_service.get_student(requester=as_student(mine), student_id=mine).student_id == mine
    with pytest.raises(AuthorizationError):
        container.student_service.get_student(requester=as_student(mine), student_id=theirs)
    with pytest.raises(AuthorizationError):
        container.student_service.list_students(requester=as_student(mine), page=PageRequest())


def test_unlinked_account_has_no_profile(container):
    with pytest.raises(NotFoundError):
        container.student_service.my_profile(requester=Requester(user_id=9, role=Role.STUDENT))


def test_course_entries_show_status_and_grade(repos, container):
    sid = seed_student(repos, "R-5")
    cid = seed_course(repos, "ST100")
    container.enrollment_service.enroll(requester=ADMIN, course_id=cid, student_id=sid)

    entries = container.student_service.list_course_entries(requester=as_faculty(1), student_id=sid)
    assert [(e.course_id, e.status, e.grade, e.course_code) for e in entries] == [
        (cid, EnrollmentStatus.ENROLLED, NOT_GRADED, "ST100")
    ]


def test_list_students_by_department(repos, container):
    seed_student(repos, "R-6", department="CS")
    ee = seed_student(repos, "R-7", department="EE")
    page = container.student_service.list_students(requester=ADMIN, page=PageRequest(), department="EE")
    assert [s.student_id for s in page.items] == [ee]
    assert page.total == 1
