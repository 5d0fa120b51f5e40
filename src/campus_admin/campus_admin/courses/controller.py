from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_list, ok_page
from ..common.pagination import parse_page_request
from ..common.validators import optional_enum, require_int
from ..container import Container
from ..core.enums import CourseStatus, EnrollmentOutcome, Term
from .service import COURSE_SORT_FIELDS


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    courses = container.course_service
    enrollment = container.enrollment_service

    def _page(*, department=None, faculty_id=None):
        args = request.args
        page = parse_page_request(args, allowed_sort=COURSE_SORT_FIELDS)
        year = args.get("year")
        result = courses.list_courses(
            requester=current_requester(),
            page=page,
            department=department or args.get("department"),
            faculty_id=faculty_id,
            status=optional_enum(CourseStatus, args.get("status"), "Status"),
            term=optional_enum(Term, args.get("semester"), "Semester"),
            year=require_int(year, "Year") if year else None,
        )
        return ok_page(result)

    def _enroll(course_id: int, student_id: int):
        result = enrollment.enroll(requester=current_requester(), course_id=course_id, student_id=student_id)
        status = 201 if result.outcome == EnrollmentOutcome.ENROLLED else 200
        return ok(result, status=status, message=result.message)

    def _withdraw(course_id: int, student_id: int):
        result = enrollment.withdraw(requester=current_requester(), course_id=course_id, student_id=student_id)
        return ok(result, message=result.message)

    @app.get("/api/courses", endpoint="courses_list")
    @auth_required
    def courses_list():
        return _page()

    @app.get("/api/courses/department/<department>", endpoint="courses_by_department")
    @auth_required
    def courses_by_department(department: str):
        return _page(department=department)

    @app.get("/api/courses/faculty/<int:faculty_id>", endpoint="courses_by_faculty")
    @auth_required
    def courses_by_faculty(faculty_id: int):
        return ok_list(courses.list_for_faculty(requester=current_requester(), faculty_id=faculty_id))

    @app.get("/api/courses/student/<int:student_id>", endpoint="courses_by_student")
    @auth_required
    def courses_by_student(student_id: int):
        return ok_list(courses.list_for_student(requester=current_requester(), student_id=student_id))

    @app.post("/api/courses", endpoint="courses_create")
    @auth_required
    def courses_create():
        return ok(courses.create_course(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/courses/<int:course_id>", endpoint="courses_get")
    @auth_required
    def courses_get(course_id: int):
        return ok(courses.get_course(requester=current_requester(), course_id=course_id))

    @app.put("/api/courses/<int:course_id>", endpoint="courses_update")
    @auth_required
    def courses_update(course_id: int):
        return ok(courses.update_course(requester=current_requester(), course_id=course_id, data=json_body()))

    @app.put("/api/courses/<int:course_id>/status", endpoint="courses_status")
    @auth_required
    def courses_status(course_id: int):
        course = courses.set_status(requester=current_requester(), course_id=course_id, status=json_body().get("status"))
        return ok(course)

    @app.delete("/api/courses/<int:course_id>", endpoint="courses_delete")
    @auth_required
    def courses_delete(course_id: int):
        courses.delete_course(requester=current_requester(), course_id=course_id)
        return ok()

    @app.get("/api/courses/<int:course_id>/students", endpoint="courses_roster")
    @auth_required
    def courses_roster(course_id: int):
        return ok_list(courses.roster(requester=current_requester(), course_id=course_id))

    @app.get("/api/courses/<int:course_id>/waitlist", endpoint="courses_waitlist")
    @auth_required
    def courses_waitlist(course_id: int):
        return ok_list(courses.waitlist(requester=current_requester(), course_id=course_id))

    @app.post("/api/courses/<int:course_id>/enroll/<int:student_id>", endpoint="courses_enroll")
    @auth_required
    def courses_enroll(course_id: int, student_id: int):
        return _enroll(course_id, student_id)

    @app.delete("/api/courses/<int:course_id>/enroll/<int:student_id>", endpoint="courses_withdraw")
    @auth_required
    def courses_withdraw(course_id: int, student_id: int):
        return _withdraw(course_id, student_id)

    @app.post("/api/students/<int:student_id>/enroll/<int:course_id>", endpoint="students_enroll")
    @auth_required
    def students_enroll(student_id: int, course_id: int):
        return _enroll(course_id, student_id)

    @app.delete("/api/students/<int:student_id>/withdraw/<int:course_id>", endpoint="students_withdraw")
    @auth_required
    def students_withdraw(student_id: int, course_id: int):
        return _withdraw(course_id, student_id)

    @app.put("/api/courses/<int:course_id>/assign/<int:faculty_id>", endpoint="courses_assign")
    @auth_required
    def courses_assign(course_id: int, faculty_id: int):
        course = courses.assign_faculty(requester=current_requester(), course_id=course_id, faculty_id=faculty_id)
        return ok(course)

    @app.delete("/api/courses/<int:course_id>/assign/<int:faculty_id>", endpoint="courses_unassign")
    @auth_required
    def courses_unassign(course_id: int, faculty_id: int):
        course = courses.remove_faculty(requester=current_requester(), course_id=course_id, faculty_id=faculty_id)
        return ok(course)
