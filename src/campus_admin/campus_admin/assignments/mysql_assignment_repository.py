from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AssignmentStatus, SubmissionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Assignment
from .repository import AssignmentRepository

_COLUMNS = """
    assignment_id, course_id, faculty_id, title, description, due_date, total_marks,
    assignment_number, submission_type, status, attachments, created_at
"""


def _row_to_assignment(row: dict) -> Assignment:
    return Assignment(
        assignment_id=int(row["assignment_id"]),
        course_id=int(row["course_id"]),
        faculty_id=row.get("faculty_id"),
        title=row["title"],
        description=row.get("description"),
        due_date=row["due_date"],
        total_marks=int(row["total_marks"]),
        assignment_number=row.get("assignment_number"),
        submission_type=SubmissionType(row["submission_type"]),
        status=AssignmentStatus(row["status"]),
        attachments=tuple(load_json(row.get("attachments"), default=[]) or []),
        created_at=row.get("created_at"),
    )


def _params(a: Assignment) -> tuple:
    return (
        a.course_id,
        a.faculty_id,
        a.title,
        a.description,
        a.due_date,
        a.total_marks,
        a.assignment_number,
        a.submission_type.value,
        a.status.value,
        dump_json(list(a.attachments)),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, assignment_id: int) -> Optional[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM assignments WHERE assignment_id=%s", (int(assignment_id),))
            row = fetchone(cur)
            return _row_to_assignment(row) if row else None

    def add(self, assignment: Assignment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO assignments(
                    course_id, faculty_id, title, description, due_date, total_marks,
                    assignment_number, submission_type, status, attachments
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(assignment),
            )
            return int(cur.lastrowid)

    def update(self, assignment: Assignment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE assignments
                SET course_id=%s, faculty_id=%s, title=%s, description=%s, due_date=%s, total_marks=%s,
                    assignment_number=%s, submission_type=%s, status=%s, attachments=%s
                WHERE assignment_id=%s
                """,
                _params(assignment) + (int(assignment.assignment_id),),
            )

    def delete(self, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM assignments WHERE assignment_id=%s", (int(assignment_id),))
            return cur.rowcount > 0

    def list_by(self, *, course_id: Optional[int] = None, faculty_id: Optional[int] = None) -> Sequence[Assignment]:
        clauses: list[str] = []
        params: list = []
        if course_id is not None:
            clauses.append("course_id=%s")
            params.append(int(course_id))
        if faculty_id is not None:
            clauses.append("faculty_id=%s")
            params.append(int(faculty_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM assignments {where} ORDER BY due_date, assignment_id", tuple(params))
            return [_row_to_assignment(r) for r in fetchall(cur)]
