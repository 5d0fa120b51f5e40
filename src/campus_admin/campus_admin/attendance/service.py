from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Optional, Sequence

from ..common.validators import optional_text, parse_date_field, require_enum, require_int
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..courses.model import Course
from ..courses.repository import CourseRepository
from ..students.repository import StudentRepository
from .model import Attendance
from .repository import AttendanceRepository
from .stats import AttendanceStats, student_stats

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, courses: CourseRepository, students: StudentRepository):
        self._attendance = attendance
        self._courses = courses
        self._students = students

    def _require_course(self, course_id: int) -> Course:
        course = self._courses.get(course_id)
        if not course:
            raise NotFoundError(f"No course with the id of {course_id}")
        return course

    def _require_record(self, attendance_id: int) -> Attendance:
        rec = self._attendance.get(attendance_id)
        if not rec:
            raise NotFoundError(f"No attendance record with the id of {attendance_id}")
        return rec

    @staticmethod
    def _marker(requester: Requester, course: Course) -> Optional[int]:
        if requester.role == Role.FACULTY:
            return requester.profile_id
        return course.faculty_id

    def _check_student(self, course: Course, student_id: int) -> None:
        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        if student_id not in course.enrolled_ids:
            raise ValidationError(f"Student {student_id} is not enrolled in course {course.code}")

    def mark(self, *, requester: Requester, data: dict[str, Any]) -> Attendance:
        course = self._require_course(require_int(data.get("course_id"), "Course", min_value=1))
        authorize(requester, "attendance", "write", owners=[course.faculty_id])

        student_id = require_int(data.get("student_id"), "Student", min_value=1)
        on_date = parse_date_field(data.get("date"), "Date")
        if on_date is None:
            raise ValidationError("Date is required")
        status = require_enum(AttendanceStatus, data.get("status"), "Status")
        self._check_student(course, student_id)

        if self._attendance.get_for(student_id=student_id, course_id=course.course_id, on_date=on_date):
            raise ConflictError("Attendance already marked for this student, course and date")

        record = Attendance(
            attendance_id=0,
            student_id=student_id,
            course_id=course.course_id,
            date=on_date,
            status=status,
            faculty_id=self._marker(requester, course),
            remarks=optional_text(data.get("remarks")),
        )
        return self._require_record(self._attendance.add(record))

    def bulk_mark(self, *, requester: Requester, data: dict[str, Any]) -> list[Attendance]:
        """Mark a whole class at once. Either every record is stored or none is."""
        course = self._require_course(require_int(data.get("course_id"), "Course", min_value=1))
        authorize(requester, "attendance", "write", owners=[course.faculty_id])

        on_date = parse_date_field(data.get("date"), "Date")
        if on_date is None:
            raise ValidationError("Date is required")
        entries = data.get("records")
        if not isinstance(entries, list) or not entries:
            raise ValidationError("Records must be a non-empty list")

        records: list[Attendance] = []
        seen: set[int] = set()
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValidationError("Each record must be an object")
            student_id = require_int(entry.get("student_id"), "Student", min_value=1)
            if student_id in seen:
                raise ValidationError(f"Student {student_id} appears more than once")
            seen.add(student_id)
            self._check_student(course, student_id)
            if self._attendance.get_for(student_id=student_id, course_id=course.course_id, on_date=on_date):
                raise ConflictError(f"Attendance already marked for student {student_id} on {on_date.isoformat()}")
            records.append(
                Attendance(
                    attendance_id=0,
                    student_id=student_id,
                    course_id=course.course_id,
                    date=on_date,
                    status=require_enum(AttendanceStatus, entry.get("status"), "Status"),
                    faculty_id=self._marker(requester, course),
                    remarks=optional_text(entry.get("remarks")),
                )
            )

        ids = self._attendance.add_many(records)
        logger.info("Bulk attendance: %s records for course %s on %s", len(ids), course.course_id, on_date)
        return [self._require_record(i) for i in ids]

    def update(self, *, requester: Requester, attendance_id: int, data: dict[str, Any]) -> Attendance:
        rec = self._require_record(attendance_id)
        course = self._require_course(rec.course_id)
        authorize(requester, "attendance", "write", owners=[course.faculty_id])

        new_date = parse_date_field(data.get("date"), "Date") or rec.date
        if new_date != rec.date:
            clash = self._attendance.get_for(student_id=rec.student_id, course_id=rec.course_id, on_date=new_date)
            if clash and clash.attendance_id != rec.attendance_id:
                raise ConflictError("Attendance already marked for this student, course and date")

        updated = replace(
            rec,
            date=new_date,
            status=require_enum(AttendanceStatus, data.get("status", rec.status), "Status"),
            remarks=optional_text(data["remarks"]) if "remarks" in data else rec.remarks,
        )
        self._attendance.update(updated)
        return self._require_record(attendance_id)

    def delete(self, *, requester: Requester, attendance_id: int) -> None:
        authorize(requester, "attendance", "delete")
        self._require_record(attendance_id)
        self._attendance.delete(attendance_id)

    def get(self, *, requester: Requester, attendance_id: int) -> Attendance:
        rec = self._require_record(attendance_id)
        course = self._courses.get(rec.course_id)
        authorize(
            requester, "attendance", "read", owners=[rec.student_id, course.faculty_id if course else None]
        )
        return rec

    def list_records(
        self,
        *,
        requester: Requester,
        course_id: Optional[int] = None,
        student_id: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[Attendance]:
        authorize(requester, "attendance", "list")
        return self._attendance.list_by(student_id=student_id, course_id=course_id, on_date=on_date)

    def list_for_student(self, *, requester: Requester, student_id: int) -> Sequence[Attendance]:
        authorize(requester, "attendance", "student", owners=[student_id])
        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        return self._attendance.list_by(student_id=student_id)

    def list_for_course(self, *, requester: Requester, course_id: int) -> Sequence[Attendance]:
        course = self._require_course(course_id)
        authorize(requester, "attendance", "course", owners=[course.faculty_id])
        return self._attendance.list_by(course_id=course_id)

    def student_stats(self, *, requester: Requester, student_id: int) -> AttendanceStats:
        authorize(requester, "attendance", "student", owners=[student_id])
        if not self._students.get(student_id):
            raise NotFoundError(f"No student with the id of {student_id}")
        return student_stats(self._attendance.list_by(student_id=student_id))

    def list_by_date(self, *, requester: Requester, on_date: date) -> Sequence[Attendance]:
        """Records for one day; students only see their own."""
        own = requester.profile_id if requester.role == Role.STUDENT else None
        authorize(requester, "attendance", "date", owners=[requester.profile_id])
        return self._attendance.list_by(student_id=own, on_date=on_date)
