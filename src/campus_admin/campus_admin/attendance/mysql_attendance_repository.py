from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Attendance
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, student_id, course_id, faculty_id, attendance_date, status, remarks, created_at"

_INSERT = """
    INSERT INTO attendance(student_id, course_id, faculty_id, attendance_date, status, remarks)
    VALUES(%s,%s,%s,%s,%s,%s)
"""


def _row_to_attendance(row: dict) -> Attendance:
    return Attendance(
        attendance_id=int(row["attendance_id"]),
        student_id=int(row["student_id"]),
        course_id=int(row["course_id"]),
        date=row["attendance_date"],
        status=AttendanceStatus(row["status"]),
        faculty_id=row.get("faculty_id"),
        remarks=row.get("remarks"),
        created_at=row.get("created_at"),
    )


def _insert_params(r: Attendance) -> tuple:
    return (r.student_id, r.course_id, r.faculty_id, r.date, r.status.value, r.remarks)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, attendance_id: int) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _row_to_attendance(row) if row else None

    def get_for(self, *, student_id: int, course_id: int, on_date: date) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance
                WHERE student_id=%s AND course_id=%s AND attendance_date=%s
                """,
                (int(student_id), int(course_id), on_date),
            )
            row = fetchone(cur)
            return _row_to_attendance(row) if row else None

    def add(self, record: Attendance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT, _insert_params(record))
            return int(cur.lastrowid)

    def add_many(self, records: Sequence[Attendance]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for record in records:
                cur.execute(_INSERT, _insert_params(record))
                ids.append(int(cur.lastrowid))
        return ids

    def update(self, record: Attendance) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET attendance_date=%s, status=%s, remarks=%s, faculty_id=%s
                WHERE attendance_id=%s
                """,
                (record.date, record.status.value, record.remarks, record.faculty_id, int(record.attendance_id)),
            )

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_by(
        self,
        *,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[Attendance]:
        clauses: list[str] = []
        params: list = []
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        if course_id is not None:
            clauses.append("course_id=%s")
            params.append(int(course_id))
        if on_date is not None:
            clauses.append("attendance_date=%s")
            params.append(on_date)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance {where} ORDER BY attendance_date DESC, attendance_id",
                tuple(params),
            )
            return [_row_to_attendance(r) for r in fetchall(cur)]
