from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Grade


class GradeRepository(Protocol):
    def get(self, grade_id: int) -> Optional[Grade]:
        raise NotImplementedError

    def get_for(self, *, student_id: int, assignment_id: int) -> Optional[Grade]:
        raise NotImplementedError

    def add(self, grade: Grade) -> int:
        """Insert a grade. Raises ConflictError if the (student, assignment) pair is taken."""

        raise NotImplementedError

    def update(self, grade: Grade) -> None:
        raise NotImplementedError

    def delete(self, grade_id: int) -> bool:
        raise NotImplementedError

    def list_by(
        self,
        *,
        student_id: Optional[int] = None,
        assignment_id: Optional[int] = None,
        course_id: Optional[int] = None,
    ) -> Sequence[Grade]:
        raise NotImplementedError
