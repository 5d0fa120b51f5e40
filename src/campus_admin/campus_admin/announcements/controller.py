from __future__ import annotations

from flask import Flask

from ..common.http import current_requester, json_body, login_required, ok, ok_list
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    announcements = container.announcement_service

    @app.get("/api/announcements", endpoint="announcements_list")
    @auth_required
    def announcements_list():
        return ok_list(announcements.list_announcements(requester=current_requester()))

    @app.get("/api/courses/<int:course_id>/announcements", endpoint="course_announcements")
    @auth_required
    def course_announcements(course_id: int):
        return ok_list(announcements.list_for_course(requester=current_requester(), course_id=course_id))

    @app.post("/api/announcements", endpoint="announcements_create")
    @auth_required
    def announcements_create():
        ann = announcements.create_announcement(requester=current_requester(), data=json_body())
        return ok(ann, status=201)

    @app.post("/api/courses/<int:course_id>/announcements", endpoint="course_announcements_create")
    @auth_required
    def course_announcements_create(course_id: int):
        data = {**json_body(), "course_id": course_id}
        return ok(announcements.create_announcement(requester=current_requester(), data=data), status=201)

    @app.get("/api/announcements/<int:announcement_id>", endpoint="announcements_get")
    @auth_required
    def announcements_get(announcement_id: int):
        return ok(announcements.get_announcement(requester=current_requester(), announcement_id=announcement_id))

    @app.put("/api/announcements/<int:announcement_id>", endpoint="announcements_update")
    @auth_required
    def announcements_update(announcement_id: int):
        ann = announcements.update_announcement(
            requester=current_requester(), announcement_id=announcement_id, data=json_body()
        )
        return ok(ann)

    @app.delete("/api/announcements/<int:announcement_id>", endpoint="announcements_delete")
    @auth_required
    def announcements_delete(announcement_id: int):
        announcements.delete_announcement(requester=current_requester(), announcement_id=announcement_id)
        return ok()
