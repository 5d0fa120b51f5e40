from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.campus_admin.campus_admin.attendance.model import Attendance
from src.campus_admin.campus_admin.attendance.stats import percentage, student_stats
from src.campus_admin.campus_admin.core.enums import AttendanceStatus


def _records(course_id, statuses, *, start=date(2024, 2, 1)):
    return [
        Attendance(
            attendance_id=0,
            student_id=1,
            course_id=course_id,
            date=start + timedelta(days=i),
            status=status,
        )
        for i, status in enumerate(statuses)
    ]


def test_no_records_gives_zero_percentage():
    stats = student_stats([])
    assert stats.total_classes == 0
    assert stats.attendance_percentage == 0
    assert stats.to_json()["courseAttendance"] == {}


@pytest.mark.parametrize(
    "part,total,expected",
    [(0, 3, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 200, 1), (1, 400, 0), (5, 5, 100)],
)
def test_percentage_rounds_half_up(part, total, expected):
    assert percentage(part, total) == expected


def test_late_counts_toward_total_only():
    stats = student_stats(
        _records(1, [AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.ABSENT, AttendanceStatus.PRESENT])
    )
    assert (stats.total_classes, stats.present_classes, stats.absent_classes) == (4, 2, 1)
    assert stats.attendance_percentage == 50


def test_breakdown_per_course():
    records = _records(1, [AttendanceStatus.PRESENT] * 3) + _records(2, [AttendanceStatus.ABSENT, AttendanceStatus.PRESENT])
    stats = student_stats(records)

    assert stats.by_course[1].percentage == 100
    assert stats.by_course[2].percentage == 50
    assert stats.attendance_percentage == 80
    payload = stats.to_json()
    assert payload["courseAttendance"]["2"] == {"total": 2, "present": 1, "absent": 1, "percentage": 50}
    assert payload["totalClasses"] == 5
