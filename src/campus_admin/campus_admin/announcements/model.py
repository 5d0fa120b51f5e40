from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import AnnouncementStatus, Audience, Priority


@dataclass(frozen=True)
class ReadReceipt:
    user_id: int
    read_at: datetime


@dataclass(frozen=True)
class Announcement:
    announcement_id: int
    title: str
    content: str
    author_user_id: int
    visible_from: datetime
    faculty_id: Optional[int] = None
    course_id: Optional[int] = None
    priority: Priority = Priority.MEDIUM
    target_audience: Audience = Audience.ALL
    status: AnnouncementStatus = AnnouncementStatus.PUBLISHED
    visible_until: Optional[datetime] = None
    attachments: tuple[str, ...] = ()
    read_by: tuple[ReadReceipt, ...] = ()
    created_at: Optional[datetime] = None

    @property
    def read_count(self) -> int:
        return len(self.read_by)

    def is_active(self, now: datetime) -> bool:
        if self.status != AnnouncementStatus.PUBLISHED or now < self.visible_from:
            return False
        return self.visible_until is None or now <= self.visible_until

    def to_json(self) -> dict:
        return {
            "announcement_id": self.announcement_id,
            "title": self.title,
            "content": self.content,
            "author_user_id": self.author_user_id,
            "faculty_id": self.faculty_id,
            "course_id": self.course_id,
            "priority": self.priority.value,
            "target_audience": self.target_audience.value,
            "status": self.status.value,
            "visible_from": self.visible_from.isoformat(),
            "visible_until": self.visible_until.isoformat() if self.visible_until else None,
            "attachments": list(self.attachments),
            "is_active": self.is_active(now_local()),
            "read_count": self.read_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
