"""Attendance aggregation: counts and percentages per student."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..core.enums import AttendanceStatus
from .model import Attendance


def percentage(part: int, total: int) -> int:
    """``round(part / total * 100)`` with halves rounded up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


@dataclass(frozen=True)
class CourseAttendance:
    total: int
    present: int
    absent: int

    @property
    def percentage(self) -> int:
        return percentage(self.present, self.total)

    def to_json(self) -> dict:
        return {"total": self.total, "present": self.present, "absent": self.absent, "percentage": self.percentage}


@dataclass(frozen=True)
class AttendanceStats:
    total_classes: int
    present_classes: int
    absent_classes: int
    by_course: dict[int, CourseAttendance] = field(default_factory=dict)

    @property
    def attendance_percentage(self) -> int:
        return percentage(self.present_classes, self.total_classes)

    def to_json(self) -> dict:
        return {
            "totalClasses": self.total_classes,
            "presentClasses": self.present_classes,
            "absentClasses": self.absent_classes,
            "attendancePercentage": self.attendance_percentage,
            "courseAttendance": {str(cid): c.to_json() for cid, c in self.by_course.items()},
        }


def student_stats(records: Iterable[Attendance]) -> AttendanceStats:
    """Aggregate one student's attendance records.

    A ``late`` mark counts toward the total but neither as present nor absent.
    """
    total = present = absent = 0
    per_course: dict[int, list[int]] = {}
    for rec in records:
        counts = per_course.setdefault(rec.course_id, [0, 0, 0])
        total += 1
        counts[0] += 1
        if rec.status == AttendanceStatus.PRESENT:
            present += 1
            counts[1] += 1
        elif rec.status == AttendanceStatus.ABSENT:
            absent += 1
            counts[2] += 1

    return AttendanceStats(
        total_classes=total,
        present_classes=present,
        absent_classes=absent,
        by_course={cid: CourseAttendance(total=c[0], present=c[1], absent=c[2]) for cid, c in per_course.items()},
    )
