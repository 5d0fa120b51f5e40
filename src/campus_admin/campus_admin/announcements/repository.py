from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Announcement


class AnnouncementRepository(Protocol):
    def get(self, announcement_id: int) -> Optional[Announcement]:
        raise NotImplementedError

    def add(self, announcement: Announcement) -> int:
        raise NotImplementedError

    def update(self, announcement: Announcement) -> None:
        raise NotImplementedError

    def delete(self, announcement_id: int) -> bool:
        raise NotImplementedError

    def list_by(self, *, course_id: Optional[int] = None) -> Sequence[Announcement]:
        raise NotImplementedError

    def mark_read(self, *, announcement_id: int, user_id: int, at: datetime) -> None:
        """Record a read receipt; repeated reads keep the first timestamp."""

        raise NotImplementedError
