from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AssignmentStatus, SubmissionType


@dataclass(frozen=True)
class Assignment:
    assignment_id: int
    course_id: int
    title: str
    due_date: datetime
    total_marks: int
    faculty_id: Optional[int] = None
    description: Optional[str] = None
    assignment_number: Optional[int] = None
    submission_type: SubmissionType = SubmissionType.BOTH
    status: AssignmentStatus = AssignmentStatus.PUBLISHED
    attachments: tuple[str, ...] = ()
    created_at: Optional[datetime] = None
