from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from fakes import ADMIN, as_faculty, as_student, seed_assignment, seed_course, seed_faculty, seed_student
from src.campus_admin.campus_admin.core.enums import CourseStatus, SubmissionStatus
from src.campus_admin.campus_admin.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ScoreOutOfRangeError,
    ValidationError,
)
from src.campus_admin.campus_admin.grading.service import check_score


@pytest.fixture
def graded_course(repos, container):
    fid = seed_faculty(repos, "G100")
    cid = seed_course(repos, "GR100", faculty_id=fid)
    sid = seed_student(repos, "GS1")
    container.enrollment_service.enroll(requester=ADMIN, course_id=cid, student_id=sid)
    aid = seed_assignment(repos, cid, due_date=datetime(2024, 3, 10), total_marks=100, faculty_id=fid)
    return fid, cid, sid, aid


@pytest.mark.parametrize("score", [0, 50.5, 100])
def test_scores_within_bounds_are_accepted(score):
    assert check_score(score, 100) == score


@pytest.mark.parametrize("score", [-1, 101, 150])
def test_scores_outside_bounds_are_rejected(score):
    with pytest.raises(ScoreOutOfRangeError):
        check_score(score, 100)


@pytest.mark.parametrize("score", ["nan", float("nan"), "inf", float("-inf"), "abc", None, True])
def test_non_numeric_scores_are_rejected(score):
    with pytest.raises(ValidationError):
        check_score(score, 100)


def test_nan_score_is_never_stored(container, graded_course):
    fid, _, sid, aid = graded_course
    with pytest.raises(ValidationError):
        container.grading_service.record_grade(
            requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": "nan"}
        )
    assert container.repos.grades.list_by(assignment_id=aid) == []


def test_record_grade_once_per_student_and_assignment(container, graded_course):
    fid, _, sid, aid = graded_course
    grading = container.grading_service

    with pytest.raises(ScoreOutOfRangeError):
        grading.record_grade(requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 150})

    grade = grading.record_grade(
        requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 95, "feedback": "Good"}
    )
    assert grade.score == 95
    assert grade.graded_by == fid

    with pytest.raises(ConflictError):
        grading.record_grade(requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 80})


def test_admin_grade_has_no_grader_profile(container, graded_course):
    _, _, sid, aid = graded_course
    grade = container.grading_service.record_grade(
        requester=ADMIN, data={"assignment_id": aid, "student_id": sid, "score": 70}
    )
    assert grade.graded_by is None


def test_other_faculty_cannot_grade(repos, container, graded_course):
    _, _, sid, aid = graded_course
    stranger = seed_faculty(repos, "G101")
    with pytest.raises(AuthorizationError):
        container.grading_service.record_grade(
            requester=as_faculty(stranger), data={"assignment_id": aid, "student_id": sid, "score": 70}
        )


def test_grading_marks_existing_submission_graded(container, graded_course):
    fid, _, sid, aid = graded_course
    sub = container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"submission_text": "answer"}
    )
    container.grading_service.record_grade(
        requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 88}
    )

    stored = container.repos.submissions.get(sub.submission_id)
    assert stored.status == SubmissionStatus.GRADED
    assert stored.score == 88
    assert stored.graded_by == fid


def test_grade_submission_creates_then_updates_grade(container, graded_course):
    fid, _, sid, aid = graded_course
    sub = container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"submission_text": "answer"}
    )

    graded = container.grading_service.grade_submission(
        requester=as_faculty(fid), submission_id=sub.submission_id, data={"score": 60, "feedback": "ok"}
    )
    assert graded.status == SubmissionStatus.GRADED
    assert graded.to_json()["grade"]["score"] == 60

    container.grading_service.grade_submission(
        requester=as_faculty(fid), submission_id=sub.submission_id, data={"score": 75}
    )
    grades = container.repos.grades.list_by(assignment_id=aid)
    assert [g.score for g in grades] == [75]


def test_grades_freeze_when_course_completed(repos, container, graded_course):
    fid, cid, sid, aid = graded_course
    grade = container.grading_service.record_grade(
        requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 50}
    )
    repos.courses.update(replace(repos.courses.get(cid), status=CourseStatus.COMPLETED))

    with pytest.raises(ConflictError):
        container.grading_service.update_grade(requester=as_faculty(fid), grade_id=grade.grade_id, data={"score": 60})
    assert repos.grades.get(grade.grade_id).score == 50


def test_students_read_only_their_own_grades(repos, container, graded_course):
    fid, cid, sid, aid = graded_course
    other = seed_student(repos, "GS2")
    container.grading_service.record_grade(
        requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 50}
    )

    assert len(container.grading_service.list_for_student(requester=as_student(sid), student_id=sid)) == 1
    with pytest.raises(AuthorizationError):
        container.grading_service.list_for_student(requester=as_student(other), student_id=sid)
    with pytest.raises(AuthorizationError):
        container.grading_service.list_for_course(requester=as_student(sid), course_id=cid)
    with pytest.raises(NotFoundError):
        container.grading_service.list_for_course(requester=ADMIN, course_id=999)


def test_no_new_grades_once_course_completed(repos, container, graded_course):
    fid, cid, sid, aid = graded_course
    sub = container.submission_service.create_submission(
        requester=as_student(sid), assignment_id=aid, data={"submission_text": "answer"}
    )
    repos.courses.update(replace(repos.courses.get(cid), status=CourseStatus.COMPLETED))

    with pytest.raises(ConflictError):
        container.grading_service.record_grade(
            requester=as_faculty(fid), data={"assignment_id": aid, "student_id": sid, "score": 40}
        )
    with pytest.raises(ConflictError):
        container.grading_service.grade_submission(
            requester=as_faculty(fid), submission_id=sub.submission_id, data={"score": 40}
        )
    assert repos.grades.list_by(assignment_id=aid) == []
    assert repos.submissions.get(sub.submission_id).status == SubmissionStatus.SUBMITTED
