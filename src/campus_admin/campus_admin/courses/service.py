from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    id_list,
    optional_enum,
    optional_text,
    parse_time_field,
    require_enum,
    require_int,
    require_max_length,
    require_non_empty,
)
from ..core import constants
from ..core.enums import CourseStatus, Term, Weekday
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..faculty.repository import FacultyRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import Course, Schedule
from .repository import CourseRepository

logger = logging.getLogger(__name__)

COURSE_SORT_FIELDS = ("code", "name", "department", "credits", "capacity", "year", "created_at")


class CourseService:
    def __init__(
        self,
        courses: CourseRepository,
        faculty: FacultyRepository,
        students: StudentRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._courses = courses
        self._faculty = faculty
        self._students = students
        self._clock = clock

    def _require(self, course_id: int) -> Course:
        course = self._courses.get(course_id)
        if not course:
            raise NotFoundError(f"No course with the id of {course_id}")
        return course

    # ---- reads ----
    def list_courses(
        self,
        *,
        requester: Requester,
        page: PageRequest,
        department: Optional[str] = None,
        faculty_id: Optional[int] = None,
        status: Optional[CourseStatus] = None,
        term: Optional[Term] = None,
        year: Optional[int] = None,
    ) -> Page[Course]:
        authorize(requester, "course", "read")
        return self._courses.list_page(
            department=department, faculty_id=faculty_id, status=status, term=term, year=year, page=page
        )

    def get_course(self, *, requester: Requester, course_id: int) -> Course:
        authorize(requester, "course", "read")
        return self._require(course_id)

    def list_for_student(self, *, requester: Requester, student_id: int) -> Sequence[Course]:
        authorize(requester, "student", "courses", owners=[student_id])
        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        return self._courses.list_for_student(student_id)

    def list_for_faculty(self, *, requester: Requester, faculty_id: int) -> Sequence[Course]:
        authorize(requester, "course", "read")
        if not self._faculty.get(faculty_id):
            raise NotFoundError(f"No faculty with the id of {faculty_id}")
        return self._courses.list_by_faculty(faculty_id)

    def roster(self, *, requester: Requester, course_id: int) -> list[Student]:
        course = self._require(course_id)
        authorize(requester, "course", "roster", owners=[course.faculty_id])
        return self._students_for(course.enrolled_ids)

    def waitlist(self, *, requester: Requester, course_id: int) -> list[Student]:
        course = self._require(course_id)
        authorize(requester, "course", "roster", owners=[course.faculty_id])
        return self._students_for(course.waitlist_ids)

    def _students_for(self, ids: Sequence[int]) -> list[Student]:
        out: list[Student] = []
        for sid in ids:
            student = self._students.get(sid)
            if student:
                out.append(student)
        return out

    # ---- writes ----
    def create_course(self, *, requester: Requester, data: dict[str, Any]) -> Course:
        authorize(requester, "course", "write")
        course = self._build(data, base=None)
        if self._courses.get_by_code(course.code):
            raise ConflictError(f"Course code {course.code} already exists")
        self._check_references(course)
        course_id = self._courses.add(course)
        logger.info("Course %s created (%s)", course_id, course.code)
        return self._require(course_id)

    def update_course(self, *, requester: Requester, course_id: int, data: dict[str, Any]) -> Course:
        authorize(requester, "course", "write")
        current = self._require(course_id)
        updated = self._build(data, base=current)
        if updated.code != current.code:
            other = self._courses.get_by_code(updated.code)
            if other and other.course_id != course_id:
                raise ConflictError(f"Course code {updated.code} already exists")
        self._check_references(updated)

        if updated.capacity != current.capacity:
            # Capacity is checked against the live roster under the course lock.
            with self._courses.lock_roster(course_id) as roster:
                if roster is None:
                    raise NotFoundError(f"No course with the id of {course_id}")
                if updated.capacity < len(roster.enrolled_ids):
                    raise ValidationError(
                        f"Capacity cannot be lower than the {len(roster.enrolled_ids)} students already enrolled"
                    )
                roster.set_capacity(updated.capacity)

        self._courses.update(updated)
        return self._require(course_id)

    def delete_course(self, *, requester: Requester, course_id: int) -> None:
        authorize(requester, "course", "write")
        self._require(course_id)
        self._courses.delete(course_id)
        logger.info("Course %s deleted", course_id)

    def set_status(self, *, requester: Requester, course_id: int, status: Any) -> Course:
        authorize(requester, "course", "write")
        new_status = require_enum(CourseStatus, status, "Status")
        course = self._require(course_id)
        self._courses.update(replace(course, status=new_status))
        if new_status == CourseStatus.COMPLETED:
            n = self._courses.mark_enrollments_completed(course_id, at=self._clock())
            logger.info("Course %s completed, %s enrollments finalized", course_id, n)
        return self._require(course_id)

    def assign_faculty(self, *, requester: Requester, course_id: int, faculty_id: int) -> Course:
        authorize(requester, "course", "write")
        course = self._require(course_id)
        if not self._faculty.get(faculty_id):
            raise NotFoundError(f"No faculty with the id of {faculty_id}")
        self._courses.update(replace(course, faculty_id=faculty_id))
        return self._require(course_id)

    def remove_faculty(self, *, requester: Requester, course_id: int, faculty_id: int) -> Course:
        authorize(requester, "course", "write")
        course = self._require(course_id)
        if course.faculty_id != faculty_id:
            raise ValidationError("Faculty is not assigned to this course")
        self._courses.update(replace(course, faculty_id=None))
        return self._require(course_id)

    # ---- helpers ----
    def _check_references(self, course: Course) -> None:
        if course.faculty_id is not None and not self._faculty.get(course.faculty_id):
            raise ValidationError(f"No faculty with the id of {course.faculty_id}")
        for pid in course.prerequisites:
            if pid == course.course_id:
                raise ValidationError("A course cannot be its own prerequisite")
            if not self._courses.get(pid):
                raise ValidationError(f"Prerequisite course {pid} does not exist")

    @staticmethod
    def _build(data: dict[str, Any], *, base: Optional[Course]) -> Course:
        """Validate a create/update payload; on update, absent keys keep ``base`` values."""

        def pick(key: str, default: Any = None) -> Any:
            if key in data:
                return data[key]
            return default

        semester = data.get("semester") if isinstance(data.get("semester"), dict) else {}
        schedule_in = data.get("schedule") if isinstance(data.get("schedule"), dict) else None

        code = require_non_empty(pick("code", base.code if base else None), "Course code").upper()
        require_max_length(code, "Course code", constants.COURSE_CODE_MAX)
        name = require_non_empty(pick("name", base.name if base else None), "Course name")
        require_max_length(name, "Course name", constants.COURSE_NAME_MAX)
        description = optional_text(pick("description", base.description if base else None))
        require_max_length(description, "Description", constants.COURSE_DESCRIPTION_MAX)
        syllabus = optional_text(pick("syllabus", base.syllabus if base else None))
        require_max_length(syllabus, "Syllabus", constants.COURSE_SYLLABUS_MAX)
        department = require_non_empty(pick("department", base.department if base else None), "Department")
        credits = require_int(
            pick("credits", base.credits if base else None),
            "Credits",
            min_value=constants.MIN_CREDITS,
            max_value=constants.MAX_CREDITS,
        )
        capacity = require_int(pick("capacity", base.capacity if base else None), "Capacity", min_value=1)

        term_raw = semester.get("term", data.get("term", base.term if base else None))
        year_raw = semester.get("year", data.get("year", base.year if base else None))
        term = require_enum(Term, term_raw, "Semester term")
        year = require_int(year_raw, "Semester year", min_value=1900, max_value=3000)

        status = optional_enum(CourseStatus, pick("status"), "Status") or (base.status if base else CourseStatus.ACTIVE)

        faculty_raw = pick("faculty_id", base.faculty_id if base else None)
        faculty_id = require_int(faculty_raw, "Faculty", min_value=1) if faculty_raw not in (None, "") else None

        if schedule_in is not None:
            days_raw = schedule_in.get("days") or []
            if not isinstance(days_raw, list):
                raise ValidationError("Schedule days must be a list")
            schedule = Schedule(
                days=tuple(require_enum(Weekday, d, "Schedule day") for d in days_raw),
                start_time=parse_time_field(schedule_in.get("start_time"), "Start time"),
                end_time=parse_time_field(schedule_in.get("end_time"), "End time"),
                location=optional_text(schedule_in.get("location")),
            )
            if schedule.start_time and schedule.end_time and schedule.end_time <= schedule.start_time:
                raise ValidationError("End time must be after start time")
        else:
            schedule = base.schedule if base else Schedule()

        if "prerequisites" in data:
            prerequisites = id_list(data["prerequisites"], "Prerequisites")
        else:
            prerequisites = base.prerequisites if base else ()

        return Course(
            course_id=base.course_id if base else 0,
            code=code,
            name=name,
            description=description,
            department=department,
            credits=credits,
            capacity=capacity,
            term=term,
            year=year,
            status=status,
            faculty_id=faculty_id,
            schedule=schedule,
            syllabus=syllabus,
            prerequisites=prerequisites,
            enrolled_ids=base.enrolled_ids if base else (),
            waitlist_ids=base.waitlist_ids if base else (),
            created_at=base.created_at if base else None,
        )
