from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_list, ok_page
from ..common.pagination import parse_page_request
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import StudentStatus
from .service import STUDENT_SORT_FIELDS


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    students = container.student_service

    def _page(department):
        page = parse_page_request(request.args, allowed_sort=STUDENT_SORT_FIELDS)
        status = optional_enum(StudentStatus, request.args.get("status"), "Status")
        return ok_page(
            students.list_students(requester=current_requester(), page=page, department=department, status=status)
        )

    @app.get("/api/students", endpoint="students_list")
    @auth_required
    def students_list():
        return _page(request.args.get("department"))

    @app.get("/api/students/department/<department>", endpoint="students_by_department")
    @auth_required
    def students_by_department(department: str):
        return _page(department)

    @app.get("/api/students/profile", endpoint="students_profile")
    @auth_required
    def students_profile():
        return ok(students.my_profile(requester=current_requester()))

    @app.post("/api/students", endpoint="students_create")
    @auth_required
    def students_create():
        return ok(students.create_student(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/students/<int:student_id>", endpoint="students_get")
    @auth_required
    def students_get(student_id: int):
        return ok(students.get_student(requester=current_requester(), student_id=student_id))

    @app.put("/api/students/<int:student_id>", endpoint="students_update")
    @auth_required
    def students_update(student_id: int):
        student = students.update_student(requester=current_requester(), student_id=student_id, data=json_body())
        return ok(student)

    @app.put("/api/students/<int:student_id>/status", endpoint="students_status")
    @auth_required
    def students_status(student_id: int):
        student = students.set_status(
            requester=current_requester(), student_id=student_id, status=json_body().get("status")
        )
        return ok(student)

    @app.delete("/api/students/<int:student_id>", endpoint="students_delete")
    @auth_required
    def students_delete(student_id: int):
        students.delete_student(requester=current_requester(), student_id=student_id)
        return ok()

    @app.get("/api/students/<int:student_id>/courses", endpoint="students_courses")
    @auth_required
    def students_courses(student_id: int):
        return ok_list(students.list_course_entries(requester=current_requester(), student_id=student_id))
