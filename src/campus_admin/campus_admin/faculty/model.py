from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Designation, FacultyStatus


@dataclass(frozen=True)
class Qualification:
    degree: str
    institution: str
    year: Optional[int] = None


@dataclass(frozen=True)
class Workload:
    teaching_hours: int = 0
    research_hours: int = 0
    administrative_hours: int = 0

    @property
    def total_hours(self) -> int:
        return self.teaching_hours + self.research_hours + self.administrative_hours

    def to_json(self) -> dict:
        return {
            "teaching_hours": self.teaching_hours,
            "research_hours": self.research_hours,
            "administrative_hours": self.administrative_hours,
            "total_hours": self.total_hours,
        }


@dataclass(frozen=True)
class Faculty:
    faculty_id: int
    name: str
    email: str
    faculty_code: str
    department: str
    designation: Designation
    status: FacultyStatus = FacultyStatus.ACTIVE
    join_date: Optional[date] = None
    contact_number: Optional[str] = None
    qualifications: tuple[Qualification, ...] = ()
    workload: Workload = Workload()
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
