from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Grade:
    """Score for one (student, assignment) pair. ``graded_by`` is the grader's faculty id."""

    grade_id: int
    student_id: int
    assignment_id: int
    course_id: int
    score: float
    feedback: Optional[str] = None
    graded_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
