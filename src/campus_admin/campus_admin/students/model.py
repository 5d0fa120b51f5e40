from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import NOT_GRADED
from ..core.enums import EnrollmentStatus, StudentStatus


@dataclass(frozen=True)
class Student:
    student_id: int
    name: str
    roll_number: str
    department: str
    status: StudentStatus = StudentStatus.ACTIVE
    email: Optional[str] = None
    enrollment_date: Optional[date] = None
    graduation_year: Optional[int] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StudentCourse:
    """One course entry on a student's record."""

    student_id: int
    course_id: int
    status: EnrollmentStatus
    enrolled_at: datetime
    grade: str = NOT_GRADED
    course_code: Optional[str] = None
    course_name: Optional[str] = None
