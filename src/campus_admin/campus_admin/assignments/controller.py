from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_list
from ..common.validators import require_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    assignments = container.assignment_service

    @app.get("/api/assignments", endpoint="assignments_list")
    @auth_required
    def assignments_list():
        course_id = request.args.get("course_id")
        items = assignments.list_assignments(
            requester=current_requester(),
            course_id=require_int(course_id, "Course") if course_id else None,
        )
        return ok_list(items)

    @app.get("/api/courses/<int:course_id>/assignments", endpoint="course_assignments")
    @auth_required
    def course_assignments(course_id: int):
        return ok_list(assignments.list_assignments(requester=current_requester(), course_id=course_id))

    @app.post("/api/assignments", endpoint="assignments_create")
    @auth_required
    def assignments_create():
        return ok(assignments.create_assignment(requester=current_requester(), data=json_body()), status=201)

    @app.post("/api/courses/<int:course_id>/assignments", endpoint="course_assignments_create")
    @auth_required
    def course_assignments_create(course_id: int):
        data = {**json_body(), "course_id": course_id}
        return ok(assignments.create_assignment(requester=current_requester(), data=data), status=201)

    @app.get("/api/assignments/<int:assignment_id>", endpoint="assignments_get")
    @auth_required
    def assignments_get(assignment_id: int):
        return ok(assignments.get_assignment(requester=current_requester(), assignment_id=assignment_id))

    @app.put("/api/assignments/<int:assignment_id>", endpoint="assignments_update")
    @auth_required
    def assignments_update(assignment_id: int):
        assignment = assignments.update_assignment(
            requester=current_requester(), assignment_id=assignment_id, data=json_body()
        )
        return ok(assignment)

    @app.delete("/api/assignments/<int:assignment_id>", endpoint="assignments_delete")
    @auth_required
    def assignments_delete(assignment_id: int):
        assignments.delete_assignment(requester=current_requester(), assignment_id=assignment_id)
        return ok()
