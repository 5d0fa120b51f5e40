from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_list
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    grading = container.grading_service

    @app.get("/api/grades", endpoint="grades_list")
    @auth_required
    def grades_list():
        args = request.args
        requester = current_requester()
        if args.get("assignment_id"):
            assignment_id = require_int(args["assignment_id"], "Assignment")
            return ok_list(grading.list_for_assignment(requester=requester, assignment_id=assignment_id))
        if args.get("student_id"):
            student_id = require_int(args["student_id"], "Student")
            return ok_list(grading.list_for_student(requester=requester, student_id=student_id))
        if args.get("course_id"):
            course_id = require_int(args["course_id"], "Course")
            return ok_list(grading.list_for_course(requester=requester, course_id=course_id))
        raise ValidationError("Filter by assignment_id, student_id or course_id")

    @app.post("/api/grades", endpoint="grades_create")
    @auth_required
    def grades_create():
        return ok(grading.record_grade(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/grades/<int:grade_id>", endpoint="grades_get")
    @auth_required
    def grades_get(grade_id: int):
        return ok(grading.get_grade(requester=current_requester(), grade_id=grade_id))

    @app.put("/api/grades/<int:grade_id>", endpoint="grades_update")
    @auth_required
    def grades_update(grade_id: int):
        return ok(grading.update_grade(requester=current_requester(), grade_id=grade_id, data=json_body()))

    @app.delete("/api/grades/<int:grade_id>", endpoint="grades_delete")
    @auth_required
    def grades_delete(grade_id: int):
        grading.delete_grade(requester=current_requester(), grade_id=grade_id)
        return ok()

    @app.get("/api/students/<int:student_id>/grades", endpoint="student_grades")
    @auth_required
    def student_grades(student_id: int):
        return ok_list(grading.list_for_student(requester=current_requester(), student_id=student_id))

    @app.get("/api/courses/<int:course_id>/grades", endpoint="course_grades")
    @auth_required
    def course_grades(course_id: int):
        return ok_list(grading.list_for_course(requester=current_requester(), course_id=course_id))
