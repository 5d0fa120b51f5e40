from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Attendance:
    attendance_id: int
    student_id: int
    course_id: int
    date: date
    status: AttendanceStatus
    faculty_id: Optional[int] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
