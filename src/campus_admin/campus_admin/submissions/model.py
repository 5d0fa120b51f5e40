from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SubmissionStatus


@dataclass(frozen=True)
class Submission:
    submission_id: int
    assignment_id: int
    student_id: int
    submitted_at: datetime
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    text: Optional[str] = None
    attachments: tuple[str, ...] = ()
    score: Optional[float] = None
    feedback: Optional[str] = None
    graded_by: Optional[int] = None
    graded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_json(self) -> dict:
        grade = None
        if self.score is not None:
            grade = {
                "score": self.score,
                "feedback": self.feedback,
                "graded_by": self.graded_by,
                "graded_at": self.graded_at.isoformat() if self.graded_at else None,
            }
        return {
            "submission_id": self.submission_id,
            "assignment_id": self.assignment_id,
            "student_id": self.student_id,
            "submission_text": self.text,
            "attachments": list(self.attachments),
            "submitted_at": self.submitted_at.isoformat(),
            "status": self.status.value,
            "grade": grade,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
