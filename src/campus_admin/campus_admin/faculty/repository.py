from __future__ import annotations

from typing import Optional, Protocol

from ..common.pagination import Page, PageRequest
from ..core.enums import FacultyStatus
from .model import Faculty


class FacultyRepository(Protocol):
    def get(self, faculty_id: int) -> Optional[Faculty]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Faculty]:
        raise NotImplementedError

    def get_by_code(self, faculty_code: str) -> Optional[Faculty]:
        raise NotImplementedError

    def add(self, faculty: Faculty) -> int:
        raise NotImplementedError

    def update(self, faculty: Faculty) -> None:
        raise NotImplementedError

    def delete(self, faculty_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[FacultyStatus] = None,
        page: PageRequest,
    ) -> Page[Faculty]:
        raise NotImplementedError
