from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core.enums import CourseStatus, EnrollmentOutcome, Term, Weekday


@dataclass(frozen=True)
class Schedule:
    days: tuple[Weekday, ...] = ()
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class Course:
    course_id: int
    code: str
    name: str
    department: str
    credits: int
    capacity: int
    term: Term
    year: int
    status: CourseStatus = CourseStatus.ACTIVE
    description: Optional[str] = None
    faculty_id: Optional[int] = None
    schedule: Schedule = Schedule()
    syllabus: Optional[str] = None
    prerequisites: tuple[int, ...] = ()
    enrolled_ids: tuple[int, ...] = ()
    waitlist_ids: tuple[int, ...] = ()
    created_at: Optional[datetime] = None

    @property
    def enrollment_count(self) -> int:
        return len(self.enrolled_ids)

    @property
    def waitlist_count(self) -> int:
        return len(self.waitlist_ids)

    @property
    def available_seats(self) -> int:
        return max(0, self.capacity - self.enrollment_count)

    @property
    def is_full(self) -> bool:
        return self.enrollment_count >= self.capacity

    def to_json(self) -> dict:
        return {
            "course_id": self.course_id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "department": self.department,
            "credits": self.credits,
            "capacity": self.capacity,
            "status": self.status.value,
            "semester": {"term": self.term.value, "year": self.year},
            "faculty_id": self.faculty_id,
            "schedule": {
                "days": [d.value for d in self.schedule.days],
                "start_time": self.schedule.start_time.strftime("%H:%M") if self.schedule.start_time else None,
                "end_time": self.schedule.end_time.strftime("%H:%M") if self.schedule.end_time else None,
                "location": self.schedule.location,
            },
            "syllabus": self.syllabus,
            "prerequisites": list(self.prerequisites),
            "enrolled_students": list(self.enrolled_ids),
            "waitlist": list(self.waitlist_ids),
            "enrollment_count": self.enrollment_count,
            "waitlist_count": self.waitlist_count,
            "available_seats": self.available_seats,
            "is_full": self.is_full,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class EnrollmentResult:
    """Outcome of an enroll call plus the course as it stood when the roster lock was released."""

    outcome: EnrollmentOutcome
    course_id: int
    student_id: int
    waitlist_position: Optional[int] = None
    course: Optional[Course] = None

    @property
    def message(self) -> str:
        if self.outcome == EnrollmentOutcome.WAITLISTED:
            return f"Course is full. Student added to waitlist at position {self.waitlist_position}"
        return "Student enrolled successfully"

    def to_json(self) -> dict:
        data = self.course.to_json() if self.course else {"course_id": self.course_id}
        data.update(
            outcome=self.outcome.value,
            student_id=self.student_id,
            added_to_waitlist=self.outcome == EnrollmentOutcome.WAITLISTED,
            waitlist_position=self.waitlist_position,
        )
        return data


@dataclass(frozen=True)
class WithdrawalResult:
    course_id: int
    student_id: int
    promoted_student_id: Optional[int] = None
    course: Optional[Course] = None

    @property
    def message(self) -> str:
        if self.promoted_student_id is not None:
            return f"Student withdrawn. Student {self.promoted_student_id} promoted from waitlist"
        return "Student withdrawn successfully"

    def to_json(self) -> dict:
        data = self.course.to_json() if self.course else {"course_id": self.course_id}
        data.update(student_id=self.student_id, promoted_student_id=self.promoted_student_id)
        return data
