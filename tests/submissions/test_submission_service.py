from __future__ import annotations

from datetime import datetime

import pytest

from fakes import ADMIN, as_faculty, as_student, seed_assignment, seed_course, seed_faculty, seed_student
from src.campus_admin.campus_admin.core.enums import SubmissionStatus, SubmissionType
from src.campus_admin.campus_admin.core.exceptions import AuthorizationError, ConflictError, ValidationError
from src.campus_admin.campus_admin.submissions.service import arrival_status


@pytest.fixture
def course(repos, container):
    fid = seed_faculty(repos, "S100")
    cid = seed_course(repos, "SB100", faculty_id=fid)
    sid = seed_student(repos, "SS1")
    container.enrollment_service.enroll(requester=ADMIN, course_id=cid, student_id=sid)
    return fid, cid, sid


def test_arrival_status_compares_against_due_date():
    due = datetime(2024, 3, 1, 23, 59)
    assert arrival_status(datetime(2024, 3, 1, 23, 59), due) == SubmissionStatus.SUBMITTED
    assert arrival_status(datetime(2024, 3, 2, 0, 0), due) == SubmissionStatus.LATE


def test_submission_before_due_date_is_on_time(repos, container, course):
    fid, cid, sid = course
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid)
    sub = container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"submission_text": "done"}
    )
    assert sub.status == SubmissionStatus.SUBMITTED
    assert sub.student_id == sid


def test_submission_after_due_date_is_late(repos, container, course):
    fid, cid, sid = course
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 2, 28), faculty_id=fid)
    sub = container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"attachments": ["report.pdf"]}
    )
    assert sub.status == SubmissionStatus.LATE


def test_second_submission_is_conflict(repos, container, course):
    fid, cid, sid = course
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid)
    container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"submission_text": "first"}
    )
    with pytest.raises(ConflictError):
        container.submission_service.create_submission(
            requester=as_student(sid), assignment_id=aid, data={"submission_text": "second"}
        )


def test_student_outside_course_cannot_submit(repos, container, course):
    fid, cid, _ = course
    outsider = seed_student(repos, "SS2")
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid)
    with pytest.raises(ValidationError):
        container.submission_service.create_submission(
            requester=as_student(outsider), assignment_id=aid, data={"submission_text": "x"}
        )


def test_faculty_cannot_submit(repos, container, course):
    fid, cid, _ = course
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid)
    with pytest.raises(AuthorizationError):
        container.submission_service.create_submission(
            requester=as_faculty(fid), assignment_id=aid, data={"submission_text": "x"}
        )


def test_submission_type_is_enforced(repos, container, course):
    fid, cid, sid = course
    aid = seed_assignment(
        repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid, submission_type=SubmissionType.FILE
    )
    with pytest.raises(ValidationError):
        container.submission_service.create_submission(
            requester=as_student(sid), assignment_id=aid, data={"submission_text": "text only"}
        )


def test_update_recomputes_status_until_graded(repos, container, course):
    fid, cid, sid = course
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid)
    sub = container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"submission_text": "draft"}
    )
    updated = container.submission_service.update_submission(
        requester=as_student(sid), submission_id=sub.submission_id, data={"submission_text": "final"}
    )
    assert updated.text == "final"

    container.grading_service.grade_submission(
        requester=as_faculty(fid), submission_id=sub.submission_id, data={"score": 90}
    )
    with pytest.raises(ConflictError):
        container.submission_service.update_submission(
            requester=as_student(sid), submission_id=sub.submission_id, data={"submission_text": "too late"}
        )


def test_students_list_only_their_own_submissions(repos, container, course):
    fid, cid, sid = course
    other = seed_student(repos, "SS3")
    container.enrollment_service.enroll(requester=ADMIN, course_id=cid, student_id=other)
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 5), faculty_id=fid)
    for student in (sid, other):
        container.submission_service.create_submission(
            requester=as_student(student), assignment_id=aid, data={"submission_text": "x"}
        )

    mine = container.submission_service.list_for_assignment(requester=as_student(sid), assignment_id=aid)
    assert [s.student_id for s in mine] == [sid]
    assert len(container.submission_service.list_for_assignment(requester=as_faculty(fid), assignment_id=aid)) == 2
