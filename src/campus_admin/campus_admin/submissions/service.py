from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..assignments.model import Assignment
from ..assignments.repository import AssignmentRepository
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, str_list
from ..core.enums import AssignmentStatus, Role, SubmissionStatus, SubmissionType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..courses.repository import CourseRepository
from .model import Submission
from .repository import SubmissionRepository

logger = logging.getLogger(__name__)


def arrival_status(now: datetime, due_date: datetime) -> SubmissionStatus:
    """Status of a submission written at ``now``. Not recomputed if the due date moves later."""
    return SubmissionStatus.LATE if now > due_date else SubmissionStatus.SUBMITTED


def _check_content(assignment: Assignment, text: Optional[str], attachments: tuple[str, ...]) -> None:
    if assignment.submission_type == SubmissionType.TEXT and not text:
        raise ValidationError("This assignment requires a text submission")
    if assignment.submission_type == SubmissionType.FILE and not attachments:
        raise ValidationError("This assignment requires at least one attachment")
    if not text and not attachments:
        raise ValidationError("Submission text or attachments are required")


class SubmissionService:
    def __init__(
        self,
        submissions: SubmissionRepository,
        assignments: AssignmentRepository,
        courses: CourseRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._submissions = submissions
        self._assignments = assignments
        self._courses = courses
        self._clock = clock

    def _require(self, submission_id: int) -> Submission:
        sub = self._submissions.get(submission_id)
        if not sub:
            raise NotFoundError(f"No submission with the id of {submission_id}")
        return sub

    def _require_assignment(self, assignment_id: int) -> Assignment:
        assignment = self._assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"No assignment with the id of {assignment_id}")
        return assignment

    def create_submission(self, *, requester: Requester, assignment_id: int, data: dict[str, Any]) -> Submission:
        authorize(requester, "submission", "create")
        if requester.profile_id is None:
            raise ValidationError("Account is not linked to a student profile")
        student_id = requester.profile_id

        assignment = self._require_assignment(assignment_id)
        if assignment.status != AssignmentStatus.PUBLISHED:
            raise ValidationError("Assignment is not open for submissions")
        course = self._courses.get(assignment.course_id)
        if not course or student_id not in course.enrolled_ids:
            raise ValidationError("Student is not enrolled in this assignment's course")
        if self._submissions.get_for(assignment_id=assignment_id, student_id=student_id):
            raise ConflictError("You have already submitted this assignment")

        text = optional_text(data.get("submission_text"))
        attachments = str_list(data.get("attachments"), "Attachments")
        _check_content(assignment, text, attachments)

        now = self._clock()
        submission_id = self._submissions.add(
            Submission(
                submission_id=0,
                assignment_id=assignment_id,
                student_id=student_id,
                submitted_at=now,
                status=arrival_status(now, assignment.due_date),
                text=text,
                attachments=attachments,
            )
        )
        logger.info("Submission %s created for assignment %s by student %s", submission_id, assignment_id, student_id)
        return self._require(submission_id)

    def update_submission(self, *, requester: Requester, submission_id: int, data: dict[str, Any]) -> Submission:
        current = self._require(submission_id)
        authorize(requester, "submission", "update", owners=[current.student_id])
        if current.status == SubmissionStatus.GRADED:
            raise ConflictError("Cannot update a submission that has already been graded")

        assignment = self._require_assignment(current.assignment_id)
        text = optional_text(data["submission_text"]) if "submission_text" in data else current.text
        attachments = str_list(data["attachments"], "Attachments") if "attachments" in data else current.attachments
        _check_content(assignment, text, attachments)

        now = self._clock()
        updated = replace(
            current,
            text=text,
            attachments=attachments,
            submitted_at=now,
            status=arrival_status(now, assignment.due_date),
            updated_at=now,
        )
        self._submissions.update(updated)
        return self._require(submission_id)

    def get_submission(self, *, requester: Requester, submission_id: int) -> Submission:
        sub = self._require(submission_id)
        assignment = self._assignments.get(sub.assignment_id)
        authorize(
            requester,
            "submission",
            "read",
            owners=[sub.student_id, assignment.faculty_id if assignment else None],
        )
        return sub

    def list_for_assignment(self, *, requester: Requester, assignment_id: int) -> Sequence[Submission]:
        authorize(requester, "submission", "list")
        self._require_assignment(assignment_id)
        subs = self._submissions.list_by(assignment_id=assignment_id)
        if requester.role == Role.STUDENT:
            return [s for s in subs if s.student_id == requester.profile_id]
        return subs

    def list_all(self, *, requester: Requester) -> Sequence[Submission]:
        authorize(requester, "submission", "list_all")
        return self._submissions.list_by()

    def delete_submission(self, *, requester: Requester, submission_id: int) -> None:
        authorize(requester, "submission", "delete")
        self._require(submission_id)
        self._submissions.delete(submission_id)
        logger.info("Submission %s deleted", submission_id)
