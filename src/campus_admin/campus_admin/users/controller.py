from __future__ import annotations

from flask import Flask, request

from ..common.http import current_requester, json_body, login_required, ok, ok_page
from ..common.pagination import parse_page_request
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import Role
from .service import USER_SORT_FIELDS


def register(app: Flask, container: Container) -> None:
    auth_required = login_required(container.auth_service)

    # ---- auth ----
    @app.post("/api/auth/register", endpoint="auth_register")
    def auth_register():
        session = container.auth_service.register(data=json_body())
        return ok(session, status=201)

    @app.post("/api/auth/login", endpoint="auth_login")
    def auth_login():
        data = json_body()
        session = container.auth_service.login(
            identifier=data.get("email") or data.get("username") or "",
            password=data.get("password") or "",
        )
        return ok(session)

    @app.get("/api/auth/logout", endpoint="auth_logout")
    @auth_required
    def auth_logout():
        # Tokens are stateless; the client drops its copy.
        return ok(message="Logged out")

    @app.get("/api/auth/me", endpoint="auth_me")
    @auth_required
    def auth_me():
        return ok(container.auth_service.me(requester=current_requester()))

    @app.put("/api/auth/updatedetails", endpoint="auth_update_details")
    @auth_required
    def auth_update_details():
        user = container.auth_service.update_details(requester=current_requester(), data=json_body())
        return ok(user)

    @app.put("/api/auth/updatepassword", endpoint="auth_update_password")
    @auth_required
    def auth_update_password():
        data = json_body()
        session = container.auth_service.update_password(
            requester=current_requester(),
            current_password=data.get("current_password") or "",
            new_password=data.get("new_password") or "",
        )
        return ok(session)

    @app.post("/api/auth/forgotpassword", endpoint="auth_forgot_password")
    def auth_forgot_password():
        reset_url = request.host_url.rstrip("/") + "/api/auth/resetpassword"
        sent = container.auth_service.forgot_password(email=json_body().get("email"), reset_url=reset_url)
        message = "Email sent" if sent else "Reset token created but the email could not be sent"
        return ok({"email_sent": sent}, message=message)

    @app.put("/api/auth/resetpassword/<token>", endpoint="auth_reset_password")
    def auth_reset_password(token: str):
        session = container.auth_service.reset_password(token=token, password=json_body().get("password") or "")
        return ok(session)

    @app.put("/api/auth/linkprofile", endpoint="auth_link_profile")
    @auth_required
    def auth_link_profile():
        user = container.auth_service.link_profile(
            requester=current_requester(), profile_id=json_body().get("profile_id")
        )
        return ok(user)

    @app.post("/api/students/register", endpoint="students_self_register")
    def students_self_register():
        session = container.auth_service.register_student(data=json_body())
        return ok(session, status=201)

    # ---- users (admin) ----
    def _list_users(role):
        page = parse_page_request(request.args, allowed_sort=USER_SORT_FIELDS)
        return ok_page(container.user_service.list_users(requester=current_requester(), page=page, role=role))

    @app.get("/api/users", endpoint="users_list")
    @auth_required
    def users_list():
        return _list_users(optional_enum(Role, request.args.get("role"), "Role"))

    @app.get("/api/users/students", endpoint="users_students")
    @auth_required
    def users_students():
        return _list_users(Role.STUDENT)

    @app.get("/api/users/faculty", endpoint="users_faculty")
    @auth_required
    def users_faculty():
        return _list_users(Role.FACULTY)

    @app.post("/api/users", endpoint="users_create")
    @auth_required
    def users_create():
        return ok(container.user_service.create_user(requester=current_requester(), data=json_body()), status=201)

    @app.get("/api/users/<int:user_id>", endpoint="users_get")
    @auth_required
    def users_get(user_id: int):
        return ok(container.user_service.get_user(requester=current_requester(), user_id=user_id))

    @app.put("/api/users/<int:user_id>", endpoint="users_update")
    @auth_required
    def users_update(user_id: int):
        user = container.user_service.update_user(requester=current_requester(), user_id=user_id, data=json_body())
        return ok(user)

    @app.delete("/api/users/<int:user_id>", endpoint="users_delete")
    @auth_required
    def users_delete(user_id: int):
        container.user_service.delete_user(requester=current_requester(), user_id=user_id)
        return ok()
