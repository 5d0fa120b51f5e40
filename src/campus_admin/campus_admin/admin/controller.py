from __future__ import annotations

from flask import Flask

from ..common.http import current_requester, error_response, json_body, login_required, ok, ok_list
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)
    departments = container.department_service
    years = container.academic_year_service

    @app.get("/health", endpoint="health")
    def health():
        if container.health.ping():
            return ok({"status": "ok", "database": "up"})
        return error_response("Database unreachable", 503, data={"status": "degraded", "database": "down"})

    # ---- departments ----
    @app.get("/api/admin/departments", endpoint="departments_list")
    @auth_required
    def departments_list():
        return ok_list(departments.list_departments(requester=current_requester()))

    @app.post("/api/admin/departments", endpoint="departments_create")
    @auth_required
    def departments_create():
        return ok(departments.create_department(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/admin/departments/<int:department_id>", endpoint="departments_get")
    @auth_required
    def departments_get(department_id: int):
        return ok(departments.get_department(requester=current_requester(), department_id=department_id))

    @app.put("/api/admin/departments/<int:department_id>", endpoint="departments_update")
    @auth_required
    def departments_update(department_id: int):
        dept = departments.update_department(
            requester=current_requester(), department_id=department_id, data=json_body()
        )
        return ok(dept)

    @app.delete("/api/admin/departments/<int:department_id>", endpoint="departments_delete")
    @auth_required
    def departments_delete(department_id: int):
        departments.delete_department(requester=current_requester(), department_id=department_id)
        return ok()

    # ---- academic years ----
    @app.get("/api/admin/academic-years", endpoint="academic_years_list")
    @auth_required
    def academic_years_list():
        return ok_list(years.list_years(requester=current_requester()))

    @app.get("/api/admin/academic-years/current", endpoint="academic_years_current")
    @auth_required
    def academic_years_current():
        return ok(years.current_year(requester=current_requester()))

    @app.post("/api/admin/academic-years", endpoint="academic_years_create")
    @auth_required
    def academic_years_create():
        return ok(years.create_year(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/admin/academic-years/<int:academic_year_id>", endpoint="academic_years_get")
    @auth_required
    def academic_years_get(academic_year_id: int):
        return ok(years.get_year(requester=current_requester(), academic_year_id=academic_year_id))

    @app.put("/api/admin/academic-years/<int:academic_year_id>", endpoint="academic_years_update")
    @auth_required
    def academic_years_update(academic_year_id: int):
        year = years.update_year(requester=current_requester(), academic_year_id=academic_year_id, data=json_body())
        return ok(year)

    @app.delete("/api/admin/academic-years/<int:academic_year_id>", endpoint="academic_years_delete")
    @auth_required
    def academic_years_delete(academic_year_id: int):
        years.delete_year(requester=current_requester(), academic_year_id=academic_year_id)
        return ok()
