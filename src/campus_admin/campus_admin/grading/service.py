"""Grading workflow.

One grade per (student, assignment), scores within ``0..total_marks``
inclusive. Grades freeze once their course is Completed. A submission for the
same pair follows the grade into the ``graded`` state.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..assignments.model import Assignment
from ..assignments.repository import AssignmentRepository
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_int, require_number
from ..core.enums import CourseStatus, Role, SubmissionStatus
from ..core.exceptions import ConflictError, NotFoundError, ScoreOutOfRangeError
from ..core.policy import Requester, authorize
from ..courses.repository import CourseRepository
from ..students.repository import StudentRepository
from ..submissions.model import Submission
from ..submissions.repository import SubmissionRepository
from .model import Grade
from .repository import GradeRepository

logger = logging.getLogger(__name__)


def check_score(score: Any, total_marks: int) -> float:
    value = require_number(score, "Score")
    if value < 0 or value > total_marks:
        raise ScoreOutOfRangeError(f"Score must be between 0 and {total_marks}")
    return value


class GradingService:
    def __init__(
        self,
        grades: GradeRepository,
        assignments: AssignmentRepository,
        students: StudentRepository,
        courses: CourseRepository,
        submissions: SubmissionRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._grades = grades
        self._assignments = assignments
        self._students = students
        self._courses = courses
        self._submissions = submissions
        self._clock = clock

    def _require_assignment(self, assignment_id: int) -> Assignment:
        assignment = self._assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"No assignment with the id of {assignment_id}")
        return assignment

    def _require_grade(self, grade_id: int) -> Grade:
        grade = self._grades.get(grade_id)
        if not grade:
            raise NotFoundError(f"No grade with the id of {grade_id}")
        return grade

    def _check_not_finalized(self, course_id: int) -> None:
        course = self._courses.get(course_id)
        if course and course.status == CourseStatus.COMPLETED:
            raise ConflictError("Grades are finalized for this course")

    @staticmethod
    def _grader(requester: Requester) -> Optional[int]:
        return requester.profile_id if requester.role == Role.FACULTY else None

    def _mark_submission_graded(self, grade: Grade, *, submission: Optional[Submission] = None) -> None:
        sub = submission or self._submissions.get_for(assignment_id=grade.assignment_id, student_id=grade.student_id)
        if not sub:
            return
        now = self._clock()
        self._submissions.update(
            replace(
                sub,
                status=SubmissionStatus.GRADED,
                score=grade.score,
                feedback=grade.feedback,
                graded_by=grade.graded_by,
                graded_at=now,
                updated_at=now,
            )
        )

    def record_grade(self, *, requester: Requester, data: dict[str, Any]) -> Grade:
        assignment = self._require_assignment(require_int(data.get("assignment_id"), "Assignment", min_value=1))
        student_id = require_int(data.get("student_id"), "Student", min_value=1)
        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        authorize(requester, "grade", "record", owners=[assignment.faculty_id])

        score = check_score(data.get("score"), assignment.total_marks)
        self._check_not_finalized(assignment.course_id)
        if self._grades.get_for(student_id=student_id, assignment_id=assignment.assignment_id):
            raise ConflictError("Grade already exists for this student and assignment")

        grade = Grade(
            grade_id=0,
            student_id=student_id,
            assignment_id=assignment.assignment_id,
            course_id=assignment.course_id,
            score=score,
            feedback=optional_text(data.get("feedback")),
            graded_by=self._grader(requester),
            created_at=self._clock(),
        )
        grade = replace(grade, grade_id=self._grades.add(grade))
        self._mark_submission_graded(grade)
        logger.info("Grade %s recorded for student %s on assignment %s", grade.grade_id, student_id, assignment.assignment_id)
        return self._require_grade(grade.grade_id)

    def update_grade(self, *, requester: Requester, grade_id: int, data: dict[str, Any]) -> Grade:
        current = self._require_grade(grade_id)
        authorize(requester, "grade", "update", owners=[current.graded_by])
        assignment = self._require_assignment(current.assignment_id)

        score = check_score(data["score"], assignment.total_marks) if "score" in data else current.score
        self._check_not_finalized(current.course_id)

        updated = replace(
            current,
            score=score,
            feedback=optional_text(data["feedback"]) if "feedback" in data else current.feedback,
            updated_at=self._clock(),
        )
        self._grades.update(updated)
        self._mark_submission_graded(updated)
        return self._require_grade(grade_id)

    def grade_submission(self, *, requester: Requester, submission_id: int, data: dict[str, Any]) -> Submission:
        sub = self._submissions.get(submission_id)
        if not sub:
            raise NotFoundError(f"No submission with the id of {submission_id}")
        assignment = self._require_assignment(sub.assignment_id)
        authorize(requester, "submission", "grade", owners=[assignment.faculty_id])

        score = check_score(data.get("score"), assignment.total_marks)
        feedback = optional_text(data.get("feedback"))
        now = self._clock()
        self._check_not_finalized(assignment.course_id)

        existing = self._grades.get_for(student_id=sub.student_id, assignment_id=sub.assignment_id)
        if existing:
            grade = replace(
                existing, score=score, feedback=feedback, graded_by=self._grader(requester), updated_at=now
            )
            self._grades.update(grade)
        else:
            grade = Grade(
                grade_id=0,
                student_id=sub.student_id,
                assignment_id=sub.assignment_id,
                course_id=assignment.course_id,
                score=score,
                feedback=feedback,
                graded_by=self._grader(requester),
                created_at=now,
            )
            grade = replace(grade, grade_id=self._grades.add(grade))

        self._mark_submission_graded(grade, submission=sub)
        logger.info("Submission %s graded (%s/%s)", submission_id, score, assignment.total_marks)
        return self._submissions.get(submission_id) or sub

    def delete_grade(self, *, requester: Requester, grade_id: int) -> None:
        authorize(requester, "grade", "delete")
        self._require_grade(grade_id)
        self._grades.delete(grade_id)

    def get_grade(self, *, requester: Requester, grade_id: int) -> Grade:
        grade = self._require_grade(grade_id)
        assignment = self._assignments.get(grade.assignment_id)
        authorize(
            requester, "grade", "read", owners=[grade.student_id, assignment.faculty_id if assignment else None]
        )
        return grade

    def list_for_student(self, *, requester: Requester, student_id: int) -> Sequence[Grade]:
        authorize(requester, "grade", "student", owners=[student_id])
        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        return self._grades.list_by(student_id=student_id)

    def list_for_assignment(self, *, requester: Requester, assignment_id: int) -> Sequence[Grade]:
        assignment = self._require_assignment(assignment_id)
        authorize(requester, "grade", "assignment", owners=[assignment.faculty_id])
        return self._grades.list_by(assignment_id=assignment_id)

    def list_for_course(self, *, requester: Requester, course_id: int) -> Sequence[Grade]:
        course = self._courses.get(course_id)
        if not course:
            raise NotFoundError(f"No course with the id of {course_id}")
        authorize(requester, "grade", "course", owners=[course.faculty_id])
        return self._grades.list_by(course_id=course_id)
