from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Assignment


class AssignmentRepository(Protocol):
    def get(self, assignment_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def add(self, assignment: Assignment) -> int:
        raise NotImplementedError

    def update(self, assignment: Assignment) -> None:
        raise NotImplementedError

    def delete(self, assignment_id: int) -> bool:
        raise NotImplementedError

    def list_by(self, *, course_id: Optional[int] = None, faculty_id: Optional[int] = None) -> Sequence[Assignment]:
        raise NotImplementedError
