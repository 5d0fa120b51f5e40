from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_list, ok_page
from ..common.pagination import parse_page_request
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import FacultyStatus
from .service import FACULTY_SORT_FIELDS


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    faculty = container.faculty_service

    def _page(department):
        page = parse_page_request(request.args, allowed_sort=FACULTY_SORT_FIELDS)
        status = optional_enum(FacultyStatus, request.args.get("status"), "Status")
        return ok_page(
            faculty.list_faculty(requester=current_requester(), page=page, department=department, status=status)
        )

    @app.get("/api/faculty", endpoint="faculty_list")
    @auth_required
    def faculty_list():
        return _page(request.args.get("department"))

    @app.get("/api/faculty/department/<department>", endpoint="faculty_by_department")
    @auth_required
    def faculty_by_department(department: str):
        return _page(department)

    @app.get("/api/faculty/profile", endpoint="faculty_profile")
    @auth_required
    def faculty_profile():
        return ok(faculty.my_profile(requester=current_requester()))

    @app.post("/api/faculty", endpoint="faculty_create")
    @auth_required
    def faculty_create():
        return ok(faculty.create_faculty(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/faculty/<int:faculty_id>", endpoint="faculty_get")
    @auth_required
    def faculty_get(faculty_id: int):
        return ok(faculty.get_faculty(requester=current_requester(), faculty_id=faculty_id))

    @app.put("/api/faculty/<int:faculty_id>", endpoint="faculty_update")
    @auth_required
    def faculty_update(faculty_id: int):
        return ok(faculty.update_faculty(requester=current_requester(), faculty_id=faculty_id, data=json_body()))

    @app.put("/api/faculty/<int:faculty_id>/status", endpoint="faculty_status")
    @auth_required
    def faculty_status(faculty_id: int):
        member = faculty.set_status(
            requester=current_requester(), faculty_id=faculty_id, status=json_body().get("status")
        )
        return ok(member)

    @app.put("/api/faculty/<int:faculty_id>/workload", endpoint="faculty_workload")
    @auth_required
    def faculty_workload(faculty_id: int):
        return ok(faculty.update_workload(requester=current_requester(), faculty_id=faculty_id, data=json_body()))

    @app.delete("/api/faculty/<int:faculty_id>", endpoint="faculty_delete")
    @auth_required
    def faculty_delete(faculty_id: int):
        faculty.delete_faculty(requester=current_requester(), faculty_id=faculty_id)
        return ok()

    @app.get("/api/faculty/<int:faculty_id>/courses", endpoint="faculty_courses")
    @auth_required
    def faculty_courses(faculty_id: int):
        return ok_list(container.course_service.list_for_faculty(requester=current_requester(), faculty_id=faculty_id))

    @app.get("/api/faculty/<int:faculty_id>/assignments", endpoint="faculty_assignments")
    @auth_required
    def faculty_assignments(faculty_id: int):
        items = container.assignment_service.list_for_faculty(requester=current_requester(), faculty_id=faculty_id)
        return ok_list(items)
