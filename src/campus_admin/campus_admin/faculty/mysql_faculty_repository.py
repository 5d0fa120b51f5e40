from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from ..common.pagination import Page, PageRequest
from ..core.enums import Designation, FacultyStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, order_by
from .model import Faculty, Qualification, Workload
from .repository import FacultyRepository

_COLUMNS = """
    faculty_id, user_id, name, email, faculty_code, department, designation, status, join_date,
    contact_number, qualifications, teaching_hours, research_hours, administrative_hours, created_at
"""

_SORT_COLUMNS = {
    "name": "name",
    "email": "email",
    "faculty_code": "faculty_code",
    "department": "department",
    "join_date": "join_date",
}


def _row_to_faculty(row: dict) -> Faculty:
    quals = load_json(row.get("qualifications"), default=[]) or []
    return Faculty(
        faculty_id=int(row["faculty_id"]),
        name=row["name"],
        email=row["email"],
        faculty_code=row["faculty_code"],
        department=row["department"],
        designation=Designation(row["designation"]),
        status=FacultyStatus(row["status"]),
        join_date=row.get("join_date"),
        contact_number=row.get("contact_number"),
        qualifications=tuple(
            Qualification(degree=q.get("degree", ""), institution=q.get("institution", ""), year=q.get("year"))
            for q in quals
        ),
        workload=Workload(
            teaching_hours=int(row.get("teaching_hours") or 0),
            research_hours=int(row.get("research_hours") or 0),
            administrative_hours=int(row.get("administrative_hours") or 0),
        ),
        user_id=row.get("user_id"),
        created_at=row.get("created_at"),
    )


def _params(f: Faculty) -> tuple:
    return (
        f.user_id,
        f.name,
        f.email,
        f.faculty_code,
        f.department,
        f.designation.value,
        f.status.value,
        f.join_date,
        f.contact_number,
        dump_json([asdict(q) for q in f.qualifications]),
        f.workload.teaching_hours,
        f.workload.research_hours,
        f.workload.administrative_hours,
    )


class MySQLFacultyRepository(FacultyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, where: str, params: tuple) -> Optional[Faculty]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM faculty WHERE {where}", params)
            row = fetchone(cur)
            return _row_to_faculty(row) if row else None

    def get(self, faculty_id: int) -> Optional[Faculty]:
        return self._get_where("faculty_id=%s", (int(faculty_id),))

    def get_by_email(self, email: str) -> Optional[Faculty]:
        return self._get_where("email=%s", (email,))

    def get_by_code(self, faculty_code: str) -> Optional[Faculty]:
        return self._get_where("faculty_code=%s", (faculty_code,))

    def add(self, faculty: Faculty) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO faculty(
                    user_id, name, email, faculty_code, department, designation, status, join_date,
                    contact_number, qualifications, teaching_hours, research_hours, administrative_hours
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(faculty),
            )
            return int(cur.lastrowid)

    def update(self, faculty: Faculty) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE faculty
                SET user_id=%s, name=%s, email=%s, faculty_code=%s, department=%s, designation=%s,
                    status=%s, join_date=%s, contact_number=%s, qualifications=%s,
                    teaching_hours=%s, research_hours=%s, administrative_hours=%s
                WHERE faculty_id=%s
                """,
                _params(faculty) + (int(faculty.faculty_id),),
            )

    def delete(self, faculty_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM faculty WHERE faculty_id=%s", (int(faculty_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[FacultyStatus] = None,
        page: PageRequest,
    ) -> Page[Faculty]:
        clauses: list[str] = []
        params: list = []
        if department:
            clauses.append("department=%s")
            params.append(department)
        if status:
            clauses.append("status=%s")
            params.append(status.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM faculty {where}", tuple(params))
            total = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM faculty {where}
                {order_by(page.sort, page.descending, _SORT_COLUMNS, "faculty_id")}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            return Page(items=[_row_to_faculty(r) for r in fetchall(cur)], total=total, request=page)
