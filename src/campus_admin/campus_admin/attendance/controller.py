from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_list
from ..common.validators import parse_date_field, require_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    attendance = container.attendance_service

    @app.get("/api/attendance", endpoint="attendance_list")
    @auth_required
    def attendance_list():
        args = request.args
        records = attendance.list_records(
            requester=current_requester(),
            course_id=require_int(args["course_id"], "Course") if args.get("course_id") else None,
            student_id=require_int(args["student_id"], "Student") if args.get("student_id") else None,
            on_date=parse_date_field(args.get("date"), "Date"),
        )
        return ok_list(records)

    @app.post("/api/attendance", endpoint="attendance_create")
    @auth_required
    def attendance_create():
        return ok(attendance.mark(requester=current_requester(), data=json_body()), status=201)

    @app.post("/api/attendance/bulk", endpoint="attendance_bulk")
    @auth_required
    def attendance_bulk():
        return ok_list(attendance.bulk_mark(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/attendance/date/<on_date>", endpoint="attendance_by_date")
    @auth_required
    def attendance_by_date(on_date: str):
        day = parse_date_field(on_date, "Date")
        if day is None:
            raise ValidationError("Date is required")
        return ok_list(attendance.list_by_date(requester=current_requester(), on_date=day))

    @app.get("/api/attendance/<int:attendance_id>", endpoint="attendance_get")
    @auth_required
    def attendance_get(attendance_id: int):
        return ok(attendance.get(requester=current_requester(), attendance_id=attendance_id))

    @app.put("/api/attendance/<int:attendance_id>", endpoint="attendance_update")
    @auth_required
    def attendance_update(attendance_id: int):
        record = attendance.update(requester=current_requester(), attendance_id=attendance_id, data=json_body())
        return ok(record)

    @app.delete("/api/attendance/<int:attendance_id>", endpoint="attendance_delete")
    @auth_required
    def attendance_delete(attendance_id: int):
        attendance.delete(requester=current_requester(), attendance_id=attendance_id)
        return ok()

    @app.get("/api/students/<int:student_id>/attendance", endpoint="student_attendance")
    @auth_required
    def student_attendance(student_id: int):
        return ok_list(attendance.list_for_student(requester=current_requester(), student_id=student_id))

    @app.get("/api/students/<int:student_id>/attendance/stats", endpoint="student_attendance_stats")
    @auth_required
    def student_attendance_stats(student_id: int):
        return ok(attendance.student_stats(requester=current_requester(), student_id=student_id))

    @app.get("/api/courses/<int:course_id>/attendance", endpoint="course_attendance")
    @auth_required
    def course_attendance(course_id: int):
        return ok_list(attendance.list_for_course(requester=current_requester(), course_id=course_id))
