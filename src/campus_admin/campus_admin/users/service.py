from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Union

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    optional_enum,
    require_email,
    require_enum,
    require_int,
    require_min_length,
    require_non_empty,
)
from ..core.constants import DEFAULT_RESET_TOKEN_MINUTES, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..core.policy import Requester, authorize
from ..faculty.model import Faculty
from ..faculty.repository import FacultyRepository
from ..notifications.mailer import Mailer
from ..students.model import Student
from ..students.repository import StudentRepository
from ..students.service import build_student
from .model import AuthSession, User
from .repository import UserRepository
from .security import TokenIssuer, hash_password, hash_reset_token, new_reset_token, verify_password

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = ("name", "username", "email", "created_at", "role")


def _username_from(data: dict[str, Any], email: str) -> str:
    return require_non_empty(data.get("username") or email.split("@", 1)[0], "Username")


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        students: StudentRepository,
        faculty: FacultyRepository,
        tokens: TokenIssuer,
        mailer: Mailer,
        *,
        reset_token_minutes: int = DEFAULT_RESET_TOKEN_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._students = students
        self._faculty = faculty
        self._tokens = tokens
        self._mailer = mailer
        self._reset_token_minutes = int(reset_token_minutes)
        self._clock = clock

    def _session(self, user: User) -> AuthSession:
        return AuthSession(user=user, token=self._tokens.issue(user_id=user.user_id, role=user.role))

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _check_unique(self, *, username: str, email: str, user_id: Optional[int] = None) -> None:
        by_name = self._users.get_by_username(username)
        if by_name and by_name.user_id != user_id:
            raise ConflictError("Username is already taken")
        by_email = self._users.get_by_email(email)
        if by_email and by_email.user_id != user_id:
            raise ConflictError("Email is already registered")

    def resolve(self, token: str) -> Requester:
        """Turn a bearer token into the current requester (fresh role and profile)."""
        claims = self._tokens.decode(token)
        user = self._users.get_by_id(claims.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Not authorized to access this route")
        return Requester(user_id=user.user_id, role=user.role, profile_id=user.profile_id)

    def register(self, *, data: dict[str, Any]) -> AuthSession:
        name = require_non_empty(data.get("name"), "Name")
        email = require_email(data.get("email"))
        username = _username_from(data, email)
        password = require_min_length(data.get("password") or "", "Password", MIN_PASSWORD_LENGTH)
        role = optional_enum(Role, data.get("role"), "Role") or Role.STUDENT
        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered")
        self._check_unique(username=username, email=email)

        user_id = self._users.add(
            User(user_id=0, name=name, username=username, email=email, password_hash=hash_password(password), role=role)
        )
        logger.info("User %s registered as %s", user_id, role.value)
        return self._session(self._require_user(user_id))

    def register_student(self, *, data: dict[str, Any]) -> AuthSession:
        """Public sign-up: create a student profile and its linked account."""
        name = require_non_empty(data.get("name"), "Name")
        email = require_email(data.get("email"))
        username = _username_from(data, email)
        password = require_min_length(data.get("password") or "", "Password", MIN_PASSWORD_LENGTH)
        student = build_student({**data, "email": email})
        self._check_unique(username=username, email=email)
        if self._students.get_by_roll_number(student.roll_number):
            raise ConflictError(f"Roll number {student.roll_number} already exists")

        student_id = self._students.add(student)
        user_id = self._users.add(
            User(
                user_id=0,
                name=name,
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=Role.STUDENT,
                profile_id=student_id,
            )
        )
        self._students.update(replace(student, student_id=student_id, user_id=user_id))
        logger.info("Student %s self-registered with user %s", student_id, user_id)
        return self._session(self._require_user(user_id))

    def login(self, *, identifier: str, password: str) -> AuthSession:
        identifier = require_non_empty(identifier, "Email or username")
        if not password:
            raise ValidationError("Password is required")
        user = self._users.get_by_email(identifier.lower()) or self._users.get_by_username(identifier)
        if not user or not verify_password(user.password_hash, password):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is disabled")
        return self._session(user)

    def me(self, *, requester: Requester) -> dict:
        user = self._require_user(requester.user_id)
        profile: Union[Student, Faculty, None] = None
        if user.profile_id is not None:
            if user.role == Role.STUDENT:
                profile = self._students.get(user.profile_id)
            elif user.role == Role.FACULTY:
                profile = self._faculty.get(user.profile_id)
        return {"user": user, "profile": profile}

    def update_details(self, *, requester: Requester, data: dict[str, Any]) -> User:
        user = self._require_user(requester.user_id)
        name = require_non_empty(data.get("name", user.name), "Name")
        email = require_email(data.get("email", user.email))
        self._check_unique(username=user.username, email=email, user_id=user.user_id)
        self._users.update(replace(user, name=name, email=email))
        return self._require_user(user.user_id)

    def update_password(self, *, requester: Requester, current_password: str, new_password: str) -> AuthSession:
        user = self._require_user(requester.user_id)
        if not verify_password(user.password_hash, current_password or ""):
            raise AuthenticationError("Password is incorrect")
        require_min_length(new_password or "", "Password", MIN_PASSWORD_LENGTH)
        self._users.update(replace(user, password_hash=hash_password(new_password)))
        return self._session(self._require_user(user.user_id))

    def forgot_password(self, *, email: str, reset_url: str) -> bool:
        """Store a reset token and mail it. Returns whether the email went out."""
        user = self._users.get_by_email(require_email(email))
        if not user:
            raise NotFoundError("There is no user with that email")

        token, token_hash = new_reset_token()
        expires = self._clock() + timedelta(minutes=self._reset_token_minutes)
        self._users.update(replace(user, reset_token_hash=token_hash, reset_token_expires_at=expires))

        body = (
            "You are receiving this email because you (or someone else) requested a password reset.\n\n"
            f"Reset your password here: {reset_url.rstrip('/')}/{token}\n\n"
            f"The link expires in {self._reset_token_minutes} minutes."
        )
        sent = self._mailer.send(recipient=user.email, subject="Password reset token", body=body)
        if not sent:
            logger.warning("Password reset email for user %s was not delivered", user.user_id)
        return sent

    def reset_password(self, *, token: str, password: str) -> AuthSession:
        token = require_non_empty(token, "Token")
        user = self._users.get_by_reset_token(hash_reset_token(token))
        now = self._clock()
        if not user or not user.reset_token_expires_at or user.reset_token_expires_at < now:
            raise ValidationError("Invalid or expired token")
        require_min_length(password or "", "Password", MIN_PASSWORD_LENGTH)
        self._users.update(
            replace(user, password_hash=hash_password(password), reset_token_hash=None, reset_token_expires_at=None)
        )
        logger.info("Password reset for user %s", user.user_id)
        return self._session(self._require_user(user.user_id))

    def link_profile(self, *, requester: Requester, profile_id: Any) -> User:
        """Attach the account to an existing student or faculty record."""
        user = self._require_user(requester.user_id)
        pid = require_int(profile_id, "Profile", min_value=1)

        if user.role == Role.STUDENT:
            student = self._students.get(pid)
            if not student:
                raise NotFoundError(f"No student with the id of {pid}")
            if student.user_id not in (None, user.user_id):
                raise ConflictError("Student profile is already linked to another account")
            self._students.update(replace(student, user_id=user.user_id))
        elif user.role == Role.FACULTY:
            member = self._faculty.get(pid)
            if not member:
                raise NotFoundError(f"No faculty with the id of {pid}")
            if member.user_id not in (None, user.user_id):
                raise ConflictError("Faculty profile is already linked to another account")
            self._faculty.update(replace(member, user_id=user.user_id))
        else:
            raise ValidationError("Admin accounts have no profile to link")

        self._users.update(replace(user, profile_id=pid))
        logger.info("User %s linked to %s profile %s", user.user_id, user.role.value, pid)
        return self._require_user(user.user_id)


class UserService:
    def __init__(self, users: UserRepository):
        self._users = users

    def _require(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"No user with the id of {user_id}")
        return user

    def list_users(self, *, requester: Requester, page: PageRequest, role: Optional[Role] = None) -> Page[User]:
        authorize(requester, "user", "list")
        return self._users.list_page(role=role, page=page)

    def get_user(self, *, requester: Requester, user_id: int) -> User:
        authorize(requester, "user", "read")
        return self._require(user_id)

    def create_user(self, *, requester: Requester, data: dict[str, Any]) -> User:
        authorize(requester, "user", "write")
        name = require_non_empty(data.get("name"), "Name")
        email = require_email(data.get("email"))
        username = _username_from(data, email)
        password = require_min_length(data.get("password") or "", "Password", MIN_PASSWORD_LENGTH)
        role = require_enum(Role, data.get("role", Role.STUDENT.value), "Role")
        profile_raw = data.get("profile_id")
        profile_id = require_int(profile_raw, "Profile", min_value=1) if profile_raw else None

        if self._users.get_by_username(username):
            raise ConflictError("Username is already taken")
        if self._users.get_by_email(email):
            raise ConflictError("Email is already registered")

        user_id = self._users.add(
            User(
                user_id=0,
                name=name,
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=role,
                profile_id=profile_id,
            )
        )
        logger.info("User %s created by admin %s", user_id, requester.user_id)
        return self._require(user_id)

    def update_user(self, *, requester: Requester, user_id: int, data: dict[str, Any]) -> User:
        authorize(requester, "user", "write")
        user = self._require(user_id)
        email = require_email(data.get("email", user.email))
        other = self._users.get_by_email(email)
        if other and other.user_id != user_id:
            raise ConflictError("Email is already registered")
        profile_raw = data.get("profile_id", user.profile_id)
        updated = replace(
            user,
            name=require_non_empty(data.get("name", user.name), "Name"),
            email=email,
            role=require_enum(Role, data.get("role", user.role), "Role"),
            is_active=bool(data.get("is_active", user.is_active)),
            profile_id=require_int(profile_raw, "Profile", min_value=1) if profile_raw else None,
        )
        if data.get("password"):
            password = require_min_length(data["password"], "Password", MIN_PASSWORD_LENGTH)
            updated = replace(updated, password_hash=hash_password(password))
        self._users.update(updated)
        return self._require(user_id)

    def delete_user(self, *, requester: Requester, user_id: int) -> None:
        authorize(requester, "user", "write")
        if int(user_id) == requester.user_id:
            raise ValidationError("You cannot delete your own account")
        self._require(user_id)
        self._users.delete(user_id)
        logger.info("User %s deleted by admin %s", user_id, requester.user_id)
