from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Submission


class SubmissionRepository(Protocol):
    def get(self, submission_id: int) -> Optional[Submission]:
        raise NotImplementedError

    def get_for(self, *, assignment_id: int, student_id: int) -> Optional[Submission]:
        raise NotImplementedError

    def add(self, submission: Submission) -> int:
        raise NotImplementedError

    def update(self, submission: Submission) -> None:
        raise NotImplementedError

    def delete(self, submission_id: int) -> bool:
        raise NotImplementedError

    def list_by(self, *, assignment_id: Optional[int] = None, student_id: Optional[int] = None) -> Sequence[Submission]:
        raise NotImplementedError
