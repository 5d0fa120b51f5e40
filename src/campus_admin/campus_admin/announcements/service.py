from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import (
    optional_enum,
    parse_datetime_field,
    require_int,
    require_max_length,
    require_non_empty,
    str_list,
)
from ..core.constants import TITLE_MAX
from ..core.enums import AnnouncementStatus, Audience, Priority, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..courses.model import Course
from ..courses.repository import CourseRepository
from .model import Announcement
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)


class AnnouncementService:
    def __init__(
        self,
        announcements: AnnouncementRepository,
        courses: CourseRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._announcements = announcements
        self._courses = courses
        self._clock = clock

    def _require(self, announcement_id: int) -> Announcement:
        ann = self._announcements.get(announcement_id)
        if not ann:
            raise NotFoundError(f"No announcement with the id of {announcement_id}")
        return ann

    def _require_course(self, course_id: int) -> Course:
        course = self._courses.get(course_id)
        if not course:
            raise NotFoundError(f"No course with the id of {course_id}")
        return course

    def _course_ids(self, requester: Requester) -> set[int]:
        if requester.profile_id is None:
            return set()
        if requester.role == Role.STUDENT:
            return {c.course_id for c in self._courses.list_for_student(requester.profile_id)}
        if requester.role == Role.FACULTY:
            return {c.course_id for c in self._courses.list_by_faculty(requester.profile_id)}
        return set()

    @staticmethod
    def _is_author(requester: Requester, ann: Announcement) -> bool:
        if ann.author_user_id == requester.user_id:
            return True
        return requester.role == Role.FACULTY and ann.faculty_id is not None and ann.faculty_id == requester.profile_id

    def _visible(self, requester: Requester, ann: Announcement, course_ids: set[int]) -> bool:
        if requester.role == Role.ADMIN or self._is_author(requester, ann):
            return True
        if not ann.is_active(self._clock()):
            return False
        audience = ann.target_audience
        if audience == Audience.ALL:
            return ann.course_id is None or ann.course_id in course_ids
        if audience == Audience.STUDENTS:
            return requester.role == Role.STUDENT
        if audience == Audience.FACULTY:
            return requester.role == Role.FACULTY
        return ann.course_id in course_ids

    def list_announcements(self, *, requester: Requester) -> Sequence[Announcement]:
        authorize(requester, "announcement", "read")
        course_ids = self._course_ids(requester)
        return [a for a in self._announcements.list_by() if self._visible(requester, a, course_ids)]

    def list_for_course(self, *, requester: Requester, course_id: int) -> Sequence[Announcement]:
        course = self._require_course(course_id)
        authorize(requester, "announcement", "course", owners=[course.faculty_id, *course.enrolled_ids])
        course_ids = {course.course_id}
        return [
            a for a in self._announcements.list_by(course_id=course_id) if self._visible(requester, a, course_ids)
        ]

    def get_announcement(self, *, requester: Requester, announcement_id: int) -> Announcement:
        authorize(requester, "announcement", "read")
        ann = self._require(announcement_id)
        if not self._visible(requester, ann, self._course_ids(requester)):
            raise NotFoundError(f"No announcement with the id of {announcement_id}")
        self._announcements.mark_read(announcement_id=announcement_id, user_id=requester.user_id, at=self._clock())
        return self._require(announcement_id)

    def create_announcement(self, *, requester: Requester, data: dict[str, Any]) -> Announcement:
        course_raw = data.get("course_id")
        course = self._require_course(require_int(course_raw, "Course", min_value=1)) if course_raw else None
        owners = [course.faculty_id] if course else [requester.profile_id]
        authorize(requester, "announcement", "create", owners=owners)

        audience = optional_enum(Audience, data.get("target_audience"), "Target audience")
        if audience is None:
            audience = Audience.COURSE if course else Audience.ALL
        if audience == Audience.COURSE and course is None:
            raise ValidationError("A course is required for course announcements")

        ann = self._build(
            data,
            base=Announcement(
                announcement_id=0,
                title="",
                content="",
                author_user_id=requester.user_id,
                visible_from=self._clock(),
                faculty_id=requester.profile_id if requester.role == Role.FACULTY else None,
                course_id=course.course_id if course else None,
                target_audience=audience,
            ),
        )
        announcement_id = self._announcements.add(ann)
        logger.info("Announcement %s created by user %s", announcement_id, requester.user_id)
        return self._require(announcement_id)

    def update_announcement(self, *, requester: Requester, announcement_id: int, data: dict[str, Any]) -> Announcement:
        current = self._require(announcement_id)
        authorize(requester, "announcement", "write", owners=[current.faculty_id])
        if "course_id" in data and data["course_id"] != current.course_id:
            raise ValidationError("An announcement cannot be moved to another course")
        updated = self._build(data, base=current)
        if updated.target_audience == Audience.COURSE and updated.course_id is None:
            raise ValidationError("A course is required for course announcements")
        self._announcements.update(updated)
        return self._require(announcement_id)

    def delete_announcement(self, *, requester: Requester, announcement_id: int) -> None:
        current = self._require(announcement_id)
        authorize(requester, "announcement", "write", owners=[current.faculty_id])
        self._announcements.delete(announcement_id)
        logger.info("Announcement %s deleted", announcement_id)

    @staticmethod
    def _build(data: dict[str, Any], *, base: Announcement) -> Announcement:
        title = require_non_empty(data.get("title", base.title), "Title")
        require_max_length(title, "Title", TITLE_MAX)
        visible_from = parse_datetime_field(data.get("visible_from"), "Visible from") or base.visible_from
        if "visible_until" in data:
            visible_until = parse_datetime_field(data.get("visible_until"), "Visible until")
        else:
            visible_until = base.visible_until
        if visible_until is not None and visible_until < visible_from:
            raise ValidationError("Visible until must be after visible from")

        return replace(
            base,
            title=title,
            content=require_non_empty(data.get("content", base.content), "Content"),
            priority=optional_enum(Priority, data.get("priority"), "Priority") or base.priority,
            target_audience=optional_enum(Audience, data.get("target_audience"), "Target audience")
            or base.target_audience,
            status=optional_enum(AnnouncementStatus, data.get("status"), "Status") or base.status,
            visible_from=visible_from,
            visible_until=visible_until,
            attachments=str_list(data["attachments"], "Attachments") if "attachments" in data else base.attachments,
        )
