from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import StudentStatus
from .model import Student, StudentCourse


class StudentRepository(Protocol):
    def get(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        raise NotImplementedError

    def add(self, student: Student) -> int:
        raise NotImplementedError

    def update(self, student: Student) -> None:
        raise NotImplementedError

    def delete(self, student_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[StudentStatus] = None,
        page: PageRequest,
    ) -> Page[Student]:
        raise NotImplementedError

    def list_courses(self, student_id: int) -> Sequence[StudentCourse]:
        """Course entries on the student's record, joined with course code/name."""

        raise NotImplementedError
