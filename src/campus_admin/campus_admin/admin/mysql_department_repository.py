from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department
from .repository import DepartmentRepository

_COLUMNS = "department_id, name, code, head_faculty_id, description, created_at"


def _row_to_department(row: dict) -> Department:
    head = row.get("head_faculty_id")
    return Department(
        department_id=int(row["department_id"]),
        name=row["name"],
        code=row["code"],
        head_faculty_id=int(head) if head is not None else None,
        description=row.get("description"),
        created_at=row.get("created_at"),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM departments WHERE department_id=%s", (int(department_id),))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def get_by_code(self, code: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM departments WHERE code=%s", (code,))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM departments ORDER BY name")
            return [_row_to_department(r) for r in fetchall(cur)]

    def add(self, department: Department) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO departments(name, code, head_faculty_id, description)
                VALUES(%s,%s,%s,%s)
                """,
                (department.name, department.code, department.head_faculty_id, department.description),
            )
            return int(cur.lastrowid)

    def update(self, department: Department) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE departments
                SET name=%s, code=%s, head_faculty_id=%s, description=%s
                WHERE department_id=%s
                """,
                (
                    department.name,
                    department.code,
                    department.head_faculty_id,
                    department.description,
                    int(department.department_id),
                ),
            )

    def delete(self, department_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM departments WHERE department_id=%s", (int(department_id),))
            return cur.rowcount > 0
