from __future__ import annotations

from typing import Optional

from ..common.pagination import Page, PageRequest
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, order_by
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, name, username, email, password_hash, role, profile_id, is_active,
    reset_token_hash, reset_token_expires_at, created_at
"""

_SORT_COLUMNS = {"name": "name", "username": "username", "email": "email", "created_at": "created_at", "role": "role"}


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        profile_id=row.get("profile_id"),
        is_active=bool(row.get("is_active", True)),
        reset_token_hash=row.get("reset_token_hash"),
        reset_token_expires_at=row.get("reset_token_expires_at"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, where: str, params: tuple) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}", params)
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_where("user_id=%s", (int(user_id),))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._get_where("username=%s", (username,))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_where("email=%s", (email,))

    def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        return self._get_where("reset_token_hash=%s", (token_hash,))

    def add(self, user: User) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, username, email, password_hash, role, profile_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.name,
                    user.username,
                    user.email,
                    user.password_hash,
                    user.role.value,
                    user.profile_id,
                    int(user.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, username=%s, email=%s, password_hash=%s, role=%s, profile_id=%s,
                    is_active=%s, reset_token_hash=%s, reset_token_expires_at=%s
                WHERE user_id=%s
                """,
                (
                    user.name,
                    user.username,
                    user.email,
                    user.password_hash,
                    user.role.value,
                    user.profile_id,
                    int(user.is_active),
                    user.reset_token_hash,
                    user.reset_token_expires_at,
                    int(user.user_id),
                ),
            )

    def delete(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_page(self, *, role: Optional[Role], page: PageRequest) -> Page[User]:
        where = "WHERE role=%s" if role else ""
        params: tuple = (role.value,) if role else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM users {where}", params)
            total = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM users {where}
                {order_by(page.sort, page.descending, _SORT_COLUMNS, "user_id")}
                LIMIT %s OFFSET %s
                """,
                params + (page.limit, page.offset),
            )
            return Page(items=[_row_to_user(r) for r in fetchall(cur)], total=total, request=page)
