from __future__ import annotations

from flask import Flask

from ..common.http import current_requester, json_body, login_required, ok, ok_list
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    submissions = container.submission_service

    @app.get("/api/submissions", endpoint="submissions_list")
    @auth_required
    def submissions_list():
        return ok_list(submissions.list_all(requester=current_requester()))

    @app.get("/api/assignments/<int:assignment_id>/submissions", endpoint="assignment_submissions")
    @auth_required
    def assignment_submissions(assignment_id: int):
        return ok_list(submissions.list_for_assignment(requester=current_requester(), assignment_id=assignment_id))

    @app.post("/api/assignments/<int:assignment_id>/submissions", endpoint="assignment_submissions_create")
    @auth_required
    def assignment_submissions_create(assignment_id: int):
        sub = submissions.create_submission(
            requester=current_requester(), assignment_id=assignment_id, data=json_body()
        )
        return ok(sub, status=201)

    @app.get("/api/submissions/<int:submission_id>", endpoint="submissions_get")
    @auth_required
    def submissions_get(submission_id: int):
        return ok(submissions.get_submission(requester=current_requester(), submission_id=submission_id))

    @app.put("/api/submissions/<int:submission_id>", endpoint="submissions_update")
    @auth_required
    def submissions_update(submission_id: int):
        sub = submissions.update_submission(
            requester=current_requester(), submission_id=submission_id, data=json_body()
        )
        return ok(sub)

    @app.delete("/api/submissions/<int:submission_id>", endpoint="submissions_delete")
    @auth_required
    def submissions_delete(submission_id: int):
        submissions.delete_submission(requester=current_requester(), submission_id=submission_id)
        return ok()

    @app.put("/api/submissions/<int:submission_id>/grade", endpoint="submissions_grade")
    @auth_required
    def submissions_grade(submission_id: int):
        sub = container.grading_service.grade_submission(
            requester=current_requester(), submission_id=submission_id, data=json_body()
        )
        return ok(sub)
