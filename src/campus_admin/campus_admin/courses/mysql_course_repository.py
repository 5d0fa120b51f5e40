from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import CourseStatus, EnrollmentStatus, Term, Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, order_by
from .model import Course, Schedule
from .repository import CourseRepository, Roster

_COLUMNS = """
    c.course_id, c.code, c.name, c.description, c.department, c.credits, c.capacity, c.status,
    c.term, c.year, c.faculty_id, c.schedule_days, c.start_time, c.end_time, c.location,
    c.syllabus, c.created_at
"""

_SORT_COLUMNS = {
    "code": "c.code",
    "name": "c.name",
    "department": "c.department",
    "credits": "c.credits",
    "capacity": "c.capacity",
    "year": "c.year",
    "created_at": "c.created_at",
}


def _in_clause(ids: Sequence[int]) -> str:
    return ",".join(["%s"] * len(ids))


def _hydrate(cur, rows: list[dict]) -> list[Course]:
    """Attach prerequisites, roster and waitlist to course rows (one query each)."""
    if not rows:
        return []
    ids = [int(r["course_id"]) for r in rows]
    prereqs: dict[int, list[int]] = {i: [] for i in ids}
    enrolled: dict[int, list[int]] = {i: [] for i in ids}
    waitlist: dict[int, list[int]] = {i: [] for i in ids}

    cur.execute(
        f"SELECT course_id, prerequisite_id FROM course_prerequisites WHERE course_id IN ({_in_clause(ids)})",
        tuple(ids),
    )
    for r in fetchall(cur):
        prereqs[int(r["course_id"])].append(int(r["prerequisite_id"]))

    cur.execute(
        f"SELECT course_id, student_id FROM course_enrollments WHERE course_id IN ({_in_clause(ids)}) ORDER BY id",
        tuple(ids),
    )
    for r in fetchall(cur):
        enrolled[int(r["course_id"])].append(int(r["student_id"]))

    cur.execute(
        f"SELECT course_id, student_id FROM course_waitlist WHERE course_id IN ({_in_clause(ids)}) ORDER BY id",
        tuple(ids),
    )
    for r in fetchall(cur):
        waitlist[int(r["course_id"])].append(int(r["student_id"]))

    out: list[Course] = []
    for r in rows:
        cid = int(r["course_id"])
        days = [d for d in (r.get("schedule_days") or "").split(",") if d]
        out.append(
            Course(
                course_id=cid,
                code=r["code"],
                name=r["name"],
                description=r.get("description"),
                department=r["department"],
                credits=int(r["credits"]),
                capacity=int(r["capacity"]),
                status=CourseStatus(r["status"]),
                term=Term(r["term"]),
                year=int(r["year"]),
                faculty_id=r.get("faculty_id"),
                schedule=Schedule(
                    days=tuple(Weekday(d) for d in days),
                    start_time=normalize_mysql_time(r.get("start_time")),
                    end_time=normalize_mysql_time(r.get("end_time")),
                    location=r.get("location"),
                ),
                syllabus=r.get("syllabus"),
                prerequisites=tuple(prereqs[cid]),
                enrolled_ids=tuple(enrolled[cid]),
                waitlist_ids=tuple(waitlist[cid]),
                created_at=r.get("created_at"),
            )
        )
    return out


def _params(c: Course, *, with_capacity: bool = True) -> tuple:
    capacity = (c.capacity,) if with_capacity else ()
    return (
        c.code,
        c.name,
        c.description,
        c.department,
        c.credits,
        *capacity,
        c.status.value,
        c.term.value,
        c.year,
        c.faculty_id,
        ",".join(d.value for d in c.schedule.days) or None,
        c.schedule.start_time,
        c.schedule.end_time,
        c.schedule.location,
        c.syllabus,
    )


def _write_prerequisites(cur, course_id: int, prerequisites: Sequence[int]) -> None:
    cur.execute("DELETE FROM course_prerequisites WHERE course_id=%s", (course_id,))
    for pid in prerequisites:
        cur.execute(
            "INSERT INTO course_prerequisites(course_id, prerequisite_id) VALUES(%s,%s)",
            (course_id, int(pid)),
        )


class MySQLRoster(Roster):
    """Roster bound to the cursor that holds ``SELECT ... FOR UPDATE`` on the course row."""

    def __init__(self, cur, course: Course):
        self._cur = cur
        self.course = course
        self.enrolled_ids = list(course.enrolled_ids)
        self.waitlist_ids = list(course.waitlist_ids)

    def add_enrolled(self, student_id: int, *, at: datetime) -> None:
        cid = self.course.course_id
        self._cur.execute(
            "INSERT INTO course_enrollments(course_id, student_id, enrolled_at) VALUES(%s,%s,%s)",
            (cid, int(student_id), at),
        )
        self._cur.execute(
            """
            INSERT INTO student_courses(student_id, course_id, status, enrolled_at)
            VALUES(%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE status=VALUES(status), enrolled_at=VALUES(enrolled_at), updated_at=NULL
            """,
            (int(student_id), cid, EnrollmentStatus.ENROLLED.value, at),
        )
        self.enrolled_ids.append(int(student_id))

    def add_waitlisted(self, student_id: int, *, at: datetime) -> int:
        self._cur.execute(
            "INSERT INTO course_waitlist(course_id, student_id, added_at) VALUES(%s,%s,%s)",
            (self.course.course_id, int(student_id), at),
        )
        self.waitlist_ids.append(int(student_id))
        return len(self.waitlist_ids)

    def remove_enrolled(self, student_id: int, *, at: datetime) -> None:
        cid = self.course.course_id
        self._cur.execute(
            "DELETE FROM course_enrollments WHERE course_id=%s AND student_id=%s",
            (cid, int(student_id)),
        )
        self._cur.execute(
            "UPDATE student_courses SET status=%s, updated_at=%s WHERE student_id=%s AND course_id=%s",
            (EnrollmentStatus.DROPPED.value, at, int(student_id), cid),
        )
        self.enrolled_ids.remove(int(student_id))

    def pop_waitlist_head(self) -> Optional[int]:
        if not self.waitlist_ids:
            return None
        head = self.waitlist_ids.pop(0)
        self._cur.execute(
            "DELETE FROM course_waitlist WHERE course_id=%s AND student_id=%s",
            (self.course.course_id, head),
        )
        return head

    def set_capacity(self, capacity: int) -> None:
        self._cur.execute(
            "UPDATE courses SET capacity=%s WHERE course_id=%s",
            (int(capacity), self.course.course_id),
        )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, where: str, params: tuple) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses c WHERE {where}", params)
            row = fetchone(cur)
            if not row:
                return None
            return _hydrate(cur, [row])[0]

    def get(self, course_id: int) -> Optional[Course]:
        return self._get_where("c.course_id=%s", (int(course_id),))

    def get_by_code(self, code: str) -> Optional[Course]:
        return self._get_where("c.code=%s", (code,))

    def add(self, course: Course) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses(
                    code, name, description, department, credits, capacity, status, term, year,
                    faculty_id, schedule_days, start_time, end_time, location, syllabus
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(course),
            )
            course_id = int(cur.lastrowid)
            _write_prerequisites(cur, course_id, course.prerequisites)
            return course_id

    def update(self, course: Course) -> None:
        # Capacity is only written by Roster.set_capacity under the row lock.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE courses
                SET code=%s, name=%s, description=%s, department=%s, credits=%s,
                    status=%s, term=%s, year=%s, faculty_id=%s, schedule_days=%s, start_time=%s,
                    end_time=%s, location=%s, syllabus=%s
                WHERE course_id=%s
                """,
                _params(course, with_capacity=False) + (int(course.course_id),),
            )
            _write_prerequisites(cur, int(course.course_id), course.prerequisites)

    def delete(self, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE course_id=%s", (int(course_id),))
            return cur.rowcount > 0

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        faculty_id: Optional[int] = None,
        status: Optional[CourseStatus] = None,
        term: Optional[Term] = None,
        year: Optional[int] = None,
        page: PageRequest,
    ) -> Page[Course]:
        clauses: list[str] = []
        params: list = []
        for column, value in (
            ("c.department", department),
            ("c.faculty_id", faculty_id),
            ("c.status", status.value if status else None),
            ("c.term", term.value if term else None),
            ("c.year", year),
        ):
            if value is not None and value != "":
                clauses.append(f"{column}=%s")
                params.append(value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM courses c {where}", tuple(params))
            total = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM courses c {where}
                {order_by(page.sort, page.descending, _SORT_COLUMNS, "c.course_id")}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            items = _hydrate(cur, fetchall(cur))
            return Page(items=items, total=total, request=page)

    def list_by_faculty(self, faculty_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM courses c WHERE c.faculty_id=%s ORDER BY c.code",
                (int(faculty_id),),
            )
            return _hydrate(cur, fetchall(cur))

    def list_for_student(self, student_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM courses c
                JOIN course_enrollments e ON e.course_id = c.course_id
                WHERE e.student_id=%s
                ORDER BY c.code
                """,
                (int(student_id),),
            )
            return _hydrate(cur, fetchall(cur))

    def completed_course_ids(self, student_id: int) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sc.course_id
                FROM student_courses sc
                JOIN courses c ON c.course_id = sc.course_id
                WHERE sc.student_id=%s
                  AND (sc.status=%s OR (sc.status=%s AND c.status=%s))
                """,
                (
                    int(student_id),
                    EnrollmentStatus.COMPLETED.value,
                    EnrollmentStatus.ENROLLED.value,
                    CourseStatus.COMPLETED.value,
                ),
            )
            return {int(r["course_id"]) for r in fetchall(cur)}

    def mark_enrollments_completed(self, course_id: int, *, at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE student_courses
                SET status=%s, updated_at=%s
                WHERE course_id=%s AND status=%s
                """,
                (EnrollmentStatus.COMPLETED.value, at, int(course_id), EnrollmentStatus.ENROLLED.value),
            )
            return int(cur.rowcount)

    @contextmanager
    def lock_roster(self, course_id: int) -> Iterator[Optional[Roster]]:
        with db_cursor(self._conn_factory, lock_timeout=self._conn_factory.lock_wait_timeout) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses c WHERE c.course_id=%s FOR UPDATE", (int(course_id),))
            row = fetchone(cur)
            if not row:
                yield None
                return
            yield MySQLRoster(cur, _hydrate(cur, [row])[0])
