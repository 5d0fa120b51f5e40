"""Departments and academic years.

Both are admin-maintained reference data readable by every signed-in role.
Exactly one academic year may be flagged current; the repository clears the
flag on the others when a year is saved as current.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import optional_text, parse_date_field, require_enum, require_max_length, require_non_empty
from ..core.enums import Term
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..faculty.repository import FacultyRepository
from .model import AcademicTerm, AcademicYear, Department
from .repository import AcademicYearRepository, DepartmentRepository

logger = logging.getLogger(__name__)


def _date_range(data: dict[str, Any], *, start: Any = None, end: Any = None, label: str = "") -> tuple:
    start_date = parse_date_field(data.get("start_date", start), f"{label}Start date")
    end_date = parse_date_field(data.get("end_date", end), f"{label}End date")
    if start_date is None or end_date is None:
        raise ValidationError(f"{label}Start date and end date are required")
    if end_date <= start_date:
        raise ValidationError(f"{label}End date must be after start date")
    return start_date, end_date


def _terms(value: Any, year_start, year_end) -> tuple[AcademicTerm, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValidationError("Terms must be a list")
    terms: list[AcademicTerm] = []
    for entry in value:
        if not isinstance(entry, dict):
            raise ValidationError("Each term must be an object")
        name = require_enum(Term, entry.get("name"), "Term name")
        if any(t.name == name for t in terms):
            raise ValidationError(f"Term {name.value} appears more than once")
        start_date, end_date = _date_range(entry, label=f"{name.value} ")
        if start_date < year_start or end_date > year_end:
            raise ValidationError(f"Term {name.value} must fall within the academic year")
        terms.append(AcademicTerm(name=name, start_date=start_date, end_date=end_date))
    return tuple(sorted(terms, key=lambda t: t.start_date))


class DepartmentService:
    def __init__(self, departments: DepartmentRepository, faculty: FacultyRepository):
        self._departments = departments
        self._faculty = faculty

    def _require(self, department_id: int) -> Department:
        dept = self._departments.get(department_id)
        if not dept:
            raise NotFoundError(f"No department with the id of {department_id}")
        return dept

    def list_departments(self, *, requester: Requester) -> Sequence[Department]:
        authorize(requester, "department", "read")
        return self._departments.list_all()

    def get_department(self, *, requester: Requester, department_id: int) -> Department:
        authorize(requester, "department", "read")
        return self._require(department_id)

    def create_department(self, *, requester: Requester, data: dict[str, Any]) -> Department:
        authorize(requester, "department", "write")
        dept = self._build(data, base=None)
        department_id = self._departments.add(dept)
        logger.info("Department %s (%s) created", department_id, dept.code)
        return self._require(department_id)

    def update_department(self, *, requester: Requester, department_id: int, data: dict[str, Any]) -> Department:
        authorize(requester, "department", "write")
        current = self._require(department_id)
        self._departments.update(self._build(data, base=current))
        return self._require(department_id)

    def delete_department(self, *, requester: Requester, department_id: int) -> None:
        authorize(requester, "department", "write")
        self._require(department_id)
        self._departments.delete(department_id)
        logger.info("Department %s deleted", department_id)

    def _build(self, data: dict[str, Any], *, base: Optional[Department]) -> Department:
        name = require_non_empty(data.get("name", base.name if base else None), "Name")
        require_max_length(name, "Name", 100)
        code = require_non_empty(data.get("code", base.code if base else None), "Code").upper()
        require_max_length(code, "Code", 20)

        clash = self._departments.get_by_code(code)
        if clash and (base is None or clash.department_id != base.department_id):
            raise ConflictError(f"Department code {code} already exists")

        head = data.get("head_faculty_id", base.head_faculty_id if base else None)
        if head is not None and not self._faculty.get(int(head)):
            raise NotFoundError(f"No faculty with the id of {head}")

        description = data.get("description", base.description if base else None)
        return Department(
            department_id=base.department_id if base else 0,
            name=name,
            code=code,
            head_faculty_id=int(head) if head is not None else None,
            description=require_max_length(optional_text(description), "Description", 500),
            created_at=base.created_at if base else None,
        )


class AcademicYearService:
    def __init__(self, years: AcademicYearRepository):
        self._years = years

    def _require(self, academic_year_id: int) -> AcademicYear:
        year = self._years.get(academic_year_id)
        if not year:
            raise NotFoundError(f"No academic year with the id of {academic_year_id}")
        return year

    def list_years(self, *, requester: Requester) -> Sequence[AcademicYear]:
        authorize(requester, "academic_year", "read")
        return self._years.list_all()

    def get_year(self, *, requester: Requester, academic_year_id: int) -> AcademicYear:
        authorize(requester, "academic_year", "read")
        return self._require(academic_year_id)

    def current_year(self, *, requester: Requester) -> AcademicYear:
        authorize(requester, "academic_year", "read")
        for year in self._years.list_all():
            if year.is_current:
                return year
        raise NotFoundError("No current academic year is set")

    def create_year(self, *, requester: Requester, data: dict[str, Any]) -> AcademicYear:
        authorize(requester, "academic_year", "write")
        year = self._build(data, base=None)
        academic_year_id = self._years.add(year)
        logger.info("Academic year %s (%s) created", academic_year_id, year.label)
        return self._require(academic_year_id)

    def update_year(self, *, requester: Requester, academic_year_id: int, data: dict[str, Any]) -> AcademicYear:
        authorize(requester, "academic_year", "write")
        current = self._require(academic_year_id)
        self._years.update(self._build(data, base=current))
        return self._require(academic_year_id)

    def delete_year(self, *, requester: Requester, academic_year_id: int) -> None:
        authorize(requester, "academic_year", "write")
        self._require(academic_year_id)
        self._years.delete(academic_year_id)

    def _build(self, data: dict[str, Any], *, base: Optional[AcademicYear]) -> AcademicYear:
        label = require_non_empty(data.get("label", base.label if base else None), "Label")
        require_max_length(label, "Label", 20)
        clash = self._years.get_by_label(label)
        if clash and (base is None or clash.academic_year_id != base.academic_year_id):
            raise ConflictError(f"Academic year {label} already exists")

        start_date, end_date = _date_range(
            data, start=base.start_date if base else None, end=base.end_date if base else None
        )
        if "terms" in data or base is None:
            terms = _terms(data.get("terms"), start_date, end_date)
        else:
            terms = base.terms
        return AcademicYear(
            academic_year_id=base.academic_year_id if base else 0,
            label=label,
            start_date=start_date,
            end_date=end_date,
            is_current=bool(data.get("is_current", base.is_current if base else False)),
            terms=terms,
            created_at=base.created_at if base else None,
        )
