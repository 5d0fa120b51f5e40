"""Enrollment engine: capacity, FIFO waitlist and prerequisite checks.

All roster reads and writes for one course happen inside
``CourseRepository.lock_roster``, so concurrent requests on the same course
are serialized and ``len(enrolled) <= capacity`` always holds.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_local
from ..core.enums import CourseStatus, EnrollmentOutcome
from ..core.exceptions import ConflictError, NotFoundError, PrerequisiteNotMetError, StoreUnavailable, ValidationError
from ..core.policy import Requester, authorize
from ..students.repository import StudentRepository
from .model import Course, EnrollmentResult, WithdrawalResult
from .repository import CourseRepository, Roster

logger = logging.getLogger(__name__)


def _snapshot(roster: Roster) -> Course:
    return replace(roster.course, enrolled_ids=tuple(roster.enrolled_ids), waitlist_ids=tuple(roster.waitlist_ids))


class EnrollmentService:
    def __init__(
        self,
        courses: CourseRepository,
        students: StudentRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._courses = courses
        self._students = students
        self._clock = clock

    def enroll(self, *, requester: Requester, course_id: int, student_id: int) -> EnrollmentResult:
        authorize(requester, "enrollment", "enroll", owners=[student_id])

        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        completed = self._courses.completed_course_ids(student_id)

        try:
            with self._courses.lock_roster(course_id) as roster:
                if roster is None:
                    raise NotFoundError(f"No course with the id of {course_id}")
                course = roster.course
                if course.status != CourseStatus.ACTIVE:
                    raise ValidationError(f"Course is {course.status.value} and not open for enrollment")
                if student_id in roster.enrolled_ids:
                    raise ConflictError("Student is already enrolled in this course")
                if student_id in roster.waitlist_ids:
                    raise ConflictError("Student is already on the waitlist for this course")

                missing = [p for p in course.prerequisites if p not in completed]
                if missing:
                    raise PrerequisiteNotMetError(missing)

                now = self._clock()
                if len(roster.enrolled_ids) < course.capacity:
                    roster.add_enrolled(student_id, at=now)
                    logger.info("Student %s enrolled in course %s", student_id, course_id)
                    return EnrollmentResult(
                        outcome=EnrollmentOutcome.ENROLLED,
                        course_id=course_id,
                        student_id=student_id,
                        course=_snapshot(roster),
                    )

                position = roster.add_waitlisted(student_id, at=now)
                logger.info("Student %s waitlisted for course %s at position %s", student_id, course_id, position)
                return EnrollmentResult(
                    outcome=EnrollmentOutcome.WAITLISTED,
                    course_id=course_id,
                    student_id=student_id,
                    waitlist_position=position,
                    course=_snapshot(roster),
                )
        except StoreUnavailable as exc:
            logger.error("Enrollment of student %s in course %s failed: %s", student_id, course_id, exc)
            raise StoreUnavailable(
                "Enrollment could not be completed, please retry",
                context={**exc.context, "course_id": course_id, "student_id": student_id},
            ) from exc

    def withdraw(self, *, requester: Requester, course_id: int, student_id: int) -> WithdrawalResult:
        authorize(requester, "enrollment", "withdraw", owners=[student_id])

        try:
            with self._courses.lock_roster(course_id) as roster:
                if roster is None:
                    raise NotFoundError(f"No course with the id of {course_id}")
                if student_id not in roster.enrolled_ids:
                    raise ConflictError("Student is not enrolled in this course")

                now = self._clock()
                roster.remove_enrolled(student_id, at=now)

                promoted = roster.pop_waitlist_head()
                if promoted is not None:
                    roster.add_enrolled(promoted, at=now)
                    logger.info("Student %s promoted from waitlist of course %s", promoted, course_id)

                logger.info("Student %s withdrawn from course %s", student_id, course_id)
                return WithdrawalResult(
                    course_id=course_id,
                    student_id=student_id,
                    promoted_student_id=promoted,
                    course=_snapshot(roster),
                )
        except StoreUnavailable as exc:
            logger.error("Withdrawal of student %s from course %s failed: %s", student_id, course_id, exc)
            raise StoreUnavailable(
                "Withdrawal could not be completed, please retry",
                context={**exc.context, "course_id": course_id, "student_id": student_id},
            ) from exc
