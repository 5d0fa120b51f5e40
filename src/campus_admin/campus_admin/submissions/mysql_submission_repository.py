from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SubmissionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Submission
from .repository import SubmissionRepository

_COLUMNS = """
    submission_id, assignment_id, student_id, submission_text, attachments, submitted_at, status,
    score, feedback, graded_by, graded_at, updated_at
"""


def _row_to_submission(row: dict) -> Submission:
    score = row.get("score")
    return Submission(
        submission_id=int(row["submission_id"]),
        assignment_id=int(row["assignment_id"]),
        student_id=int(row["student_id"]),
        submitted_at=row["submitted_at"],
        status=SubmissionStatus(row["status"]),
        text=row.get("submission_text"),
        attachments=tuple(load_json(row.get("attachments"), default=[]) or []),
        score=float(score) if score is not None else None,
        feedback=row.get("feedback"),
        graded_by=row.get("graded_by"),
        graded_at=row.get("graded_at"),
        updated_at=row.get("updated_at"),
    )


def _params(s: Submission) -> tuple:
    return (
        s.assignment_id,
        s.student_id,
        s.text,
        dump_json(list(s.attachments)),
        s.submitted_at,
        s.status.value,
        s.score,
        s.feedback,
        s.graded_by,
        s.graded_at,
        s.updated_at,
    )


class MySQLSubmissionRepository(SubmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, submission_id: int) -> Optional[Submission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM submissions WHERE submission_id=%s", (int(submission_id),))
            row = fetchone(cur)
            return _row_to_submission(row) if row else None

    def get_for(self, *, assignment_id: int, student_id: int) -> Optional[Submission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM submissions WHERE assignment_id=%s AND student_id=%s",
                (int(assignment_id), int(student_id)),
            )
            row = fetchone(cur)
            return _row_to_submission(row) if row else None

    def add(self, submission: Submission) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO submissions(
                    assignment_id, student_id, submission_text, attachments, submitted_at, status,
                    score, feedback, graded_by, graded_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(submission),
            )
            return int(cur.lastrowid)

    def update(self, submission: Submission) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE submissions
                SET assignment_id=%s, student_id=%s, submission_text=%s, attachments=%s, submitted_at=%s,
                    status=%s, score=%s, feedback=%s, graded_by=%s, graded_at=%s, updated_at=%s
                WHERE submission_id=%s
                """,
                _params(submission) + (int(submission.submission_id),),
            )

    def delete(self, submission_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM submissions WHERE submission_id=%s", (int(submission_id),))
            return cur.rowcount > 0

    def list_by(self, *, assignment_id: Optional[int] = None, student_id: Optional[int] = None) -> Sequence[Submission]:
        clauses: list[str] = []
        params: list = []
        if assignment_id is not None:
            clauses.append("assignment_id=%s")
            params.append(int(assignment_id))
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM submissions {where} ORDER BY submitted_at, submission_id", tuple(params))
            return [_row_to_submission(r) for r in fetchall(cur)]
