from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import CourseStatus, Term
from .model import Course


class Roster(Protocol):
    """A course's roster and waitlist, held under the course's exclusive lock.

    Every mutation is written in the lock's transaction, together with the
    matching entry on the student's record.
    """

    course: Course
    enrolled_ids: list[int]
    waitlist_ids: list[int]

    def add_enrolled(self, student_id: int, *, at: datetime) -> None:
        raise NotImplementedError

    def add_waitlisted(self, student_id: int, *, at: datetime) -> int:
        """Append to the waitlist and return the 1-based position."""

        raise NotImplementedError

    def remove_enrolled(self, student_id: int, *, at: datetime) -> None:
        raise NotImplementedError

    def pop_waitlist_head(self) -> Optional[int]:
        raise NotImplementedError

    def set_capacity(self, capacity: int) -> None:
        raise NotImplementedError


class CourseRepository(Protocol):
    def get(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Course]:
        raise NotImplementedError

    def add(self, course: Course) -> int:
        """Insert the course and its prerequisites (roster fields are ignored)."""

        raise NotImplementedError

    def update(self, course: Course) -> None:
        """Persist catalog fields and prerequisites. Capacity and rosters change only via lock_roster."""

        raise NotImplementedError

    def delete(self, course_id: int) -> bool:
        raise NotImplementedError

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        faculty_id: Optional[int] = None,
        status: Optional[CourseStatus] = None,
        term: Optional[Term] = None,
        year: Optional[int] = None,
        page: PageRequest,
    ) -> Page[Course]:
        raise NotImplementedError

    def list_by_faculty(self, faculty_id: int) -> Sequence[Course]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[Course]:
        """Courses whose roster currently holds the student."""

        raise NotImplementedError

    def completed_course_ids(self, student_id: int) -> set[int]:
        """Courses the student completed: entries marked completed, or rosters of Completed courses."""

        raise NotImplementedError

    def mark_enrollments_completed(self, course_id: int, *, at: datetime) -> int:
        raise NotImplementedError

    def lock_roster(self, course_id: int) -> ContextManager[Optional[Roster]]:
        """Lock the course exclusively and yield its roster, or None if the course does not exist.

        Raises StoreUnavailable when the lock cannot be acquired in time.
        """

        raise NotImplementedError
