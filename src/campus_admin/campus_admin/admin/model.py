from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Term


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    code: str
    head_faculty_id: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AcademicTerm:
    name: Term
    start_date: date
    end_date: date


@dataclass(frozen=True)
class AcademicYear:
    academic_year_id: int
    label: str
    start_date: date
    end_date: date
    is_current: bool = False
    terms: tuple[AcademicTerm, ...] = ()
    created_at: Optional[datetime] = None
