from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AcademicYear, Department


class DepartmentRepository(Protocol):
    def get(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Department]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def add(self, department: Department) -> int:
        raise NotImplementedError

    def update(self, department: Department) -> None:
        raise NotImplementedError

    def delete(self, department_id: int) -> bool:
        raise NotImplementedError


class AcademicYearRepository(Protocol):
    def get(self, academic_year_id: int) -> Optional[AcademicYear]:
        raise NotImplementedError

    def get_by_label(self, label: str) -> Optional[AcademicYear]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AcademicYear]:
        raise NotImplementedError

    def add(self, year: AcademicYear) -> int:
        """Insert the year and its terms. Marking it current clears the flag elsewhere."""

        raise NotImplementedError

    def update(self, year: AcademicYear) -> None:
        raise NotImplementedError

    def delete(self, academic_year_id: int) -> bool:
        raise NotImplementedError
