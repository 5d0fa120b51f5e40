from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Attendance


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def get_for(self, *, student_id: int, course_id: int, on_date: date) -> Optional[Attendance]:
        raise NotImplementedError

    def add(self, record: Attendance) -> int:
        raise NotImplementedError

    def add_many(self, records: Sequence[Attendance]) -> list[int]:
        """Insert all records in one transaction, or none of them."""

        raise NotImplementedError

    def update(self, record: Attendance) -> None:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_by(
        self,
        *,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[Attendance]:
        raise NotImplementedError
