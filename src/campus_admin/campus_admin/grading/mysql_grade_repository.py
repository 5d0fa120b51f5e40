from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Grade
from .repository import GradeRepository

_COLUMNS = "grade_id, student_id, assignment_id, course_id, score, feedback, graded_by, created_at, updated_at"


def _row_to_grade(row: dict) -> Grade:
    return Grade(
        grade_id=int(row["grade_id"]),
        student_id=int(row["student_id"]),
        assignment_id=int(row["assignment_id"]),
        course_id=int(row["course_id"]),
        score=float(row["score"]),
        feedback=row.get("feedback"),
        graded_by=row.get("graded_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLGradeRepository(GradeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, grade_id: int) -> Optional[Grade]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM assignment_grades WHERE grade_id=%s", (int(grade_id),))
            row = fetchone(cur)
            return _row_to_grade(row) if row else None

    def get_for(self, *, student_id: int, assignment_id: int) -> Optional[Grade]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM assignment_grades WHERE student_id=%s AND assignment_id=%s",
                (int(student_id), int(assignment_id)),
            )
            row = fetchone(cur)
            return _row_to_grade(row) if row else None

    def add(self, grade: Grade) -> int:
        # The unique key on (student_id, assignment_id) surfaces as ConflictError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO assignment_grades(
                    student_id, assignment_id, course_id, score, feedback, graded_by, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    grade.student_id,
                    grade.assignment_id,
                    grade.course_id,
                    grade.score,
                    grade.feedback,
                    grade.graded_by,
                    grade.created_at,
                ),
            )
            return int(cur.lastrowid)

    def update(self, grade: Grade) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE assignment_grades
                SET score=%s, feedback=%s, graded_by=%s, updated_at=%s
                WHERE grade_id=%s
                """,
                (grade.score, grade.feedback, grade.graded_by, grade.updated_at, int(grade.grade_id)),
            )

    def delete(self, grade_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM assignment_grades WHERE grade_id=%s", (int(grade_id),))
            return cur.rowcount > 0

    def list_by(
        self,
        *,
        student_id: Optional[int] = None,
        assignment_id: Optional[int] = None,
        course_id: Optional[int] = None,
    ) -> Sequence[Grade]:
        clauses: list[str] = []
        params: list = []
        for column, value in (("student_id", student_id), ("assignment_id", assignment_id), ("course_id", course_id)):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(int(value))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM assignment_grades {where} ORDER BY grade_id", tuple(params))
            return [_row_to_grade(r) for r in fetchall(cur)]
