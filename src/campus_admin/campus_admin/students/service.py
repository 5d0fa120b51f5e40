from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..common.validators import (
    optional_text,
    parse_date_field,
    require_email,
    require_enum,
    require_int,
    require_non_empty,
)
from ..core.enums import StudentStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..core.policy import Requester, authorize
from .model import Student, StudentCourse
from .repository import StudentRepository

logger = logging.getLogger(__name__)

STUDENT_SORT_FIELDS = ("name", "roll_number", "department", "enrollment_date", "created_at")


def build_student(data: dict[str, Any], *, base: Optional[Student] = None) -> Student:
    """Validate a student payload. On update, absent keys keep ``base`` values."""

    def pick(key: str, current: Any) -> Any:
        return data[key] if key in data else current

    name = require_non_empty(pick("name", base.name if base else None), "Name")
    roll_number = require_non_empty(pick("roll_number", base.roll_number if base else None), "Roll number")
    department = require_non_empty(pick("department", base.department if base else None), "Department")
    status = require_enum(
        StudentStatus, pick("status", base.status if base else StudentStatus.ACTIVE), "Status"
    )
    email_raw = pick("email", base.email if base else None)
    grad_raw = pick("graduation_year", base.graduation_year if base else None)

    return Student(
        student_id=base.student_id if base else 0,
        name=name,
        roll_number=roll_number,
        department=department,
        status=status,
        email=require_email(email_raw) if email_raw else None,
        enrollment_date=parse_date_field(
            pick("enrollment_date", base.enrollment_date if base else None), "Enrollment date"
        ),
        graduation_year=require_int(grad_raw, "Graduation year", min_value=1900) if grad_raw else None,
        contact_number=optional_text(pick("contact_number", base.contact_number if base else None)),
        address=optional_text(pick("address", base.address if base else None)),
        date_of_birth=parse_date_field(pick("date_of_birth", base.date_of_birth if base else None), "Date of birth"),
        gender=optional_text(pick("gender", base.gender if base else None)),
        user_id=base.user_id if base else None,
        created_at=base.created_at if base else None,
    )


class StudentService:
    def __init__(self, students: StudentRepository):
        self._students = students

    def _require(self, student_id: int) -> Student:
        student = self._students.get(student_id)
        if not student:
            raise NotFoundError(f"No student with the id of {student_id}")
        return student

    def list_students(
        self,
        *,
        requester: Requester,
        page: PageRequest,
        department: Optional[str] = None,
        status: Optional[StudentStatus] = None,
    ) -> Page[Student]:
        authorize(requester, "student", "list")
        return self._students.list_page(department=department, status=status, page=page)

    def get_student(self, *, requester: Requester, student_id: int) -> Student:
        authorize(requester, "student", "read", owners=[student_id])
        return self._require(student_id)

    def my_profile(self, *, requester: Requester) -> Student:
        if requester.profile_id is None:
            raise NotFoundError("No student profile is linked to this account")
        authorize(requester, "student", "read", owners=[requester.profile_id])
        return self._require(requester.profile_id)

    def create_student(self, *, requester: Requester, data: dict[str, Any]) -> Student:
        authorize(requester, "student", "write")
        student = build_student(data)
        if self._students.get_by_roll_number(student.roll_number):
            raise ConflictError(f"Roll number {student.roll_number} already exists")
        student_id = self._students.add(student)
        logger.info("Student %s created (%s)", student_id, student.roll_number)
        return self._require(student_id)

    def update_student(self, *, requester: Requester, student_id: int, data: dict[str, Any]) -> Student:
        authorize(requester, "student", "write")
        current = self._require(student_id)
        updated = build_student(data, base=current)
        if updated.roll_number != current.roll_number:
            other = self._students.get_by_roll_number(updated.roll_number)
            if other and other.student_id != student_id:
                raise ConflictError(f"Roll number {updated.roll_number} already exists")
        self._students.update(updated)
        return self._require(student_id)

    def set_status(self, *, requester: Requester, student_id: int, status: Any) -> Student:
        authorize(requester, "student", "write")
        new_status = require_enum(StudentStatus, status, "Status")
        current = self._require(student_id)
        self._students.update(replace(current, status=new_status))
        return self._require(student_id)

    def delete_student(self, *, requester: Requester, student_id: int) -> None:
        authorize(requester, "student", "write")
        self._require(student_id)
        self._students.delete(student_id)
        logger.info("Student %s deleted", student_id)

    def list_course_entries(self, *, requester: Requester, student_id: int) -> Sequence[StudentCourse]:
        authorize(requester, "student", "courses", owners=[student_id])
        self._require(student_id)
        return self._students.list_courses(student_id)
