from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from ..common.pagination import Page, PageRequest
from ..common.validators import (
    optional_text,
    parse_date_field,
    require_email,
    require_enum,
    require_int,
    require_non_empty,
)
from ..core.enums import Designation, FacultyStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..courses.repository import CourseRepository
from .model import Faculty, Qualification, Workload
from .repository import FacultyRepository

logger = logging.getLogger(__name__)

FACULTY_SORT_FIELDS = ("name", "email", "faculty_code", "department", "join_date")


def _qualifications(value: Any) -> tuple[Qualification, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValidationError("Qualifications must be a list")
    out: list[Qualification] = []
    for q in value:
        if not isinstance(q, dict):
            raise ValidationError("Each qualification must be an object")
        year = q.get("year")
        out.append(
            Qualification(
                degree=require_non_empty(q.get("degree"), "Degree"),
                institution=require_non_empty(q.get("institution"), "Institution"),
                year=require_int(year, "Qualification year", min_value=1900) if year else None,
            )
        )
    return tuple(out)


def build_workload(data: dict[str, Any], *, base: Workload = Workload()) -> Workload:
    def hours(key: str, current: int) -> int:
        return require_int(data.get(key, current), key.replace("_", " ").capitalize(), min_value=0)

    return Workload(
        teaching_hours=hours("teaching_hours", base.teaching_hours),
        research_hours=hours("research_hours", base.research_hours),
        administrative_hours=hours("administrative_hours", base.administrative_hours),
    )


def build_faculty(data: dict[str, Any], *, base: Optional[Faculty] = None) -> Faculty:
    def pick(key: str, current: Any) -> Any:
        return data[key] if key in data else current

    workload_in = data.get("workload") if isinstance(data.get("workload"), dict) else {}
    return Faculty(
        faculty_id=base.faculty_id if base else 0,
        name=require_non_empty(pick("name", base.name if base else None), "Name"),
        email=require_email(pick("email", base.email if base else None)),
        faculty_code=require_non_empty(pick("faculty_code", base.faculty_code if base else None), "Faculty ID"),
        department=require_non_empty(pick("department", base.department if base else None), "Department"),
        designation=require_enum(Designation, pick("designation", base.designation if base else None), "Designation"),
        status=require_enum(FacultyStatus, pick("status", base.status if base else FacultyStatus.ACTIVE), "Status"),
        join_date=parse_date_field(pick("join_date", base.join_date if base else None), "Join date"),
        contact_number=optional_text(pick("contact_number", base.contact_number if base else None)),
        qualifications=(
            _qualifications(data["qualifications"]) if "qualifications" in data else (base.qualifications if base else ())
        ),
        workload=build_workload(workload_in, base=base.workload if base else Workload()),
        user_id=base.user_id if base else None,
        created_at=base.created_at if base else None,
    )


class FacultyService:
    def __init__(self, faculty: FacultyRepository, courses: CourseRepository):
        self._faculty = faculty
        self._courses = courses

    def _require(self, faculty_id: int) -> Faculty:
        member = self._faculty.get(faculty_id)
        if not member:
            raise NotFoundError(f"No faculty with the id of {faculty_id}")
        return member

    def list_faculty(
        self,
        *,
        requester: Requester,
        page: PageRequest,
        department: Optional[str] = None,
        status: Optional[FacultyStatus] = None,
    ) -> Page[Faculty]:
        authorize(requester, "faculty", "list")
        return self._faculty.list_page(department=department, status=status, page=page)

    def get_faculty(self, *, requester: Requester, faculty_id: int) -> Faculty:
        authorize(requester, "faculty", "read", owners=[faculty_id])
        return self._require(faculty_id)

    def my_profile(self, *, requester: Requester) -> Faculty:
        if requester.profile_id is None:
            raise NotFoundError("No faculty profile is linked to this account")
        authorize(requester, "faculty", "read", owners=[requester.profile_id])
        return self._require(requester.profile_id)

    def create_faculty(self, *, requester: Requester, data: dict[str, Any]) -> Faculty:
        authorize(requester, "faculty", "write")
        member = build_faculty(data)
        self._check_unique(member)
        faculty_id = self._faculty.add(member)
        logger.info("Faculty %s created (%s)", faculty_id, member.faculty_code)
        return self._require(faculty_id)

    def update_faculty(self, *, requester: Requester, faculty_id: int, data: dict[str, Any]) -> Faculty:
        authorize(requester, "faculty", "write")
        updated = build_faculty(data, base=self._require(faculty_id))
        self._check_unique(updated)
        self._faculty.update(updated)
        return self._require(faculty_id)

    def set_status(self, *, requester: Requester, faculty_id: int, status: Any) -> Faculty:
        authorize(requester, "faculty", "write")
        new_status = require_enum(FacultyStatus, status, "Status")
        self._faculty.update(replace(self._require(faculty_id), status=new_status))
        return self._require(faculty_id)

    def update_workload(self, *, requester: Requester, faculty_id: int, data: dict[str, Any]) -> Faculty:
        authorize(requester, "faculty", "write")
        current = self._require(faculty_id)
        self._faculty.update(replace(current, workload=build_workload(data, base=current.workload)))
        return self._require(faculty_id)

    def delete_faculty(self, *, requester: Requester, faculty_id: int) -> None:
        authorize(requester, "faculty", "write")
        self._require(faculty_id)
        assigned = self._courses.list_by_faculty(faculty_id)
        if assigned:
            raise ConflictError(
                f"Faculty is assigned to {len(assigned)} course(s). Reassign them before deleting"
            )
        self._faculty.delete(faculty_id)
        logger.info("Faculty %s deleted", faculty_id)

    def _check_unique(self, member: Faculty) -> None:
        by_email = self._faculty.get_by_email(member.email)
        if by_email and by_email.faculty_id != member.faculty_id:
            raise ConflictError(f"Email {member.email} is already in use")
        by_code = self._faculty.get_by_code(member.faculty_code)
        if by_code and by_code.faculty_id != member.faculty_id:
            raise ConflictError(f"Faculty ID {member.faculty_code} already exists")
