from __future__ import annotations

from typing import Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import EnrollmentStatus, StudentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, order_by
from .model import Student, StudentCourse
from .repository import StudentRepository

_COLUMNS = """
    student_id, user_id, name, email, roll_number, department, status, enrollment_date,
    graduation_year, contact_number, address, date_of_birth, gender, created_at
"""

_SORT_COLUMNS = {
    "name": "name",
    "roll_number": "roll_number",
    "department": "department",
    "enrollment_date": "enrollment_date",
    "created_at": "created_at",
}


def _row_to_student(row: dict) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        name=row["name"],
        roll_number=row["roll_number"],
        department=row["department"],
        status=StudentStatus(row["status"]),
        email=row.get("email"),
        enrollment_date=row.get("enrollment_date"),
        graduation_year=row.get("graduation_year"),
        contact_number=row.get("contact_number"),
        address=row.get("address"),
        date_of_birth=row.get("date_of_birth"),
        gender=row.get("gender"),
        user_id=row.get("user_id"),
        created_at=row.get("created_at"),
    )


def _params(s: Student) -> tuple:
    return (
        s.user_id,
        s.name,
        s.email,
        s.roll_number,
        s.department,
        s.status.value,
        s.enrollment_date,
        s.graduation_year,
        s.contact_number,
        s.address,
        s.date_of_birth,
        s.gender,
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE roll_number=%s", (roll_number,))
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def add(self, student: Student) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    user_id, name, email, roll_number, department, status, enrollment_date,
                    graduation_year, contact_number, address, date_of_birth, gender
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(student),
            )
            return int(cur.lastrowid)

    def update(self, student: Student) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET user_id=%s, name=%s, email=%s, roll_number=%s, department=%s, status=%s,
                    enrollment_date=%s, graduation_year=%s, contact_number=%s, address=%s,
                    date_of_birth=%s, gender=%s
                WHERE student_id=%s
                """,
                _params(student) + (int(student.student_id),),
            )

    def delete(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[StudentStatus] = None,
        page: PageRequest,
    ) -> Page[Student]:
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
            cur.execute(f"SELECT COUNT(*) AS n FROM students {where}", tuple(params))
            total = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students {where}
                {order_by(page.sort, page.descending, _SORT_COLUMNS, "student_id")}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            return Page(items=[_row_to_student(r) for r in fetchall(cur)], total=total, request=page)

    def list_courses(self, student_id: int) -> Sequence[StudentCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sc.student_id, sc.course_id, sc.status, sc.grade, sc.enrolled_at,
                       c.code AS course_code, c.name AS course_name
                FROM student_courses sc
                JOIN courses c ON c.course_id = sc.course_id
                WHERE sc.student_id=%s
                ORDER BY sc.enrolled_at, sc.course_id
                """,
                (int(student_id),),
            )
            return [
                StudentCourse(
                    student_id=int(r["student_id"]),
                    course_id=int(r["course_id"]),
                    status=EnrollmentStatus(r["status"]),
                    enrolled_at=r["enrolled_at"],
                    grade=r["grade"],
                    course_code=r.get("course_code"),
                    course_name=r.get("course_name"),
                )
                for r in fetchall(cur)
            ]
