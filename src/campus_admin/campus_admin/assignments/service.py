from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import (
    optional_enum,
    optional_text,
    parse_datetime_field,
    require_int,
    require_max_length,
    require_non_empty,
    str_list,
)
from ..core.constants import TITLE_MAX
from ..core.enums import AssignmentStatus, Role, SubmissionType
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..courses.repository import CourseRepository
from ..faculty.repository import FacultyRepository
from .model import Assignment
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)


def _visible(requester: Requester, assignment: Assignment) -> bool:
    # Students never see drafts.
    return requester.role != Role.STUDENT or assignment.status != AssignmentStatus.DRAFT


class AssignmentService:
    def __init__(self, assignments: AssignmentRepository, courses: CourseRepository, faculty: FacultyRepository):
        self._assignments = assignments
        self._courses = courses
        self._faculty = faculty

    def _require(self, assignment_id: int) -> Assignment:
        assignment = self._assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"No assignment with the id of {assignment_id}")
        return assignment

    def list_assignments(self, *, requester: Requester, course_id: Optional[int] = None) -> Sequence[Assignment]:
        authorize(requester, "assignment", "read")
        if course_id is not None and not self._courses.get(course_id):
            raise NotFoundError(f"No course with the id of {course_id}")
        return [a for a in self._assignments.list_by(course_id=course_id) if _visible(requester, a)]

    def get_assignment(self, *, requester: Requester, assignment_id: int) -> Assignment:
        authorize(requester, "assignment", "read")
        assignment = self._require(assignment_id)
        if not _visible(requester, assignment):
            raise NotFoundError(f"No assignment with the id of {assignment_id}")
        return assignment

    def list_for_faculty(self, *, requester: Requester, faculty_id: int) -> Sequence[Assignment]:
        authorize(requester, "faculty", "courses", owners=[faculty_id])
        if not self._faculty.get(faculty_id):
            raise NotFoundError(f"No faculty with the id of {faculty_id}")
        return self._assignments.list_by(faculty_id=faculty_id)

    def create_assignment(self, *, requester: Requester, data: dict[str, Any]) -> Assignment:
        course_id = require_int(data.get("course_id"), "Course", min_value=1)
        course = self._courses.get(course_id)
        if not course:
            raise NotFoundError(f"No course with the id of {course_id}")
        authorize(requester, "assignment", "write", owners=[course.faculty_id])

        due_date = parse_datetime_field(data.get("due_date"), "Due date")
        if due_date is None:
            raise ValidationError("Due date is required")
        number_raw = data.get("assignment_number")
        assignment = Assignment(
            assignment_id=0,
            course_id=course_id,
            faculty_id=requester.profile_id if requester.role == Role.FACULTY else course.faculty_id,
            title=require_max_length(require_non_empty(data.get("title"), "Title"), "Title", TITLE_MAX),
            description=optional_text(data.get("description")),
            due_date=due_date,
            total_marks=require_int(data.get("total_marks"), "Total marks", min_value=0),
            assignment_number=require_int(number_raw, "Assignment number", min_value=1) if number_raw else None,
            submission_type=optional_enum(SubmissionType, data.get("submission_type"), "Submission type")
            or SubmissionType.BOTH,
            status=optional_enum(AssignmentStatus, data.get("status"), "Status") or AssignmentStatus.PUBLISHED,
            attachments=str_list(data.get("attachments"), "Attachments"),
        )
        assignment_id = self._assignments.add(assignment)
        logger.info("Assignment %s created for course %s", assignment_id, course_id)
        return self._require(assignment_id)

    def update_assignment(self, *, requester: Requester, assignment_id: int, data: dict[str, Any]) -> Assignment:
        current = self._require(assignment_id)
        authorize(requester, "assignment", "write", owners=[current.faculty_id])

        if "course_id" in data and require_int(data["course_id"], "Course") != current.course_id:
            raise ValidationError("An assignment cannot be moved to another course")
        if "faculty_id" in data and data["faculty_id"] != current.faculty_id:
            raise ValidationError("The assignment owner cannot be changed")

        number_raw = data.get("assignment_number", current.assignment_number)
        updated = Assignment(
            assignment_id=current.assignment_id,
            course_id=current.course_id,
            faculty_id=current.faculty_id,
            title=require_max_length(require_non_empty(data.get("title", current.title), "Title"), "Title", TITLE_MAX),
            description=optional_text(data["description"]) if "description" in data else current.description,
            due_date=parse_datetime_field(data.get("due_date"), "Due date") or current.due_date,
            total_marks=require_int(data.get("total_marks", current.total_marks), "Total marks", min_value=0),
            assignment_number=require_int(number_raw, "Assignment number", min_value=1) if number_raw else None,
            submission_type=optional_enum(SubmissionType, data.get("submission_type"), "Submission type")
            or current.submission_type,
            status=optional_enum(AssignmentStatus, data.get("status"), "Status") or current.status,
            attachments=str_list(data["attachments"], "Attachments") if "attachments" in data else current.attachments,
            created_at=current.created_at,
        )
        self._assignments.update(updated)
        return self._require(assignment_id)

    def delete_assignment(self, *, requester: Requester, assignment_id: int) -> None:
        current = self._require(assignment_id)
        authorize(requester, "assignment", "write", owners=[current.faculty_id])
        self._assignments.delete(assignment_id)
        logger.info("Assignment %s deleted", assignment_id)
