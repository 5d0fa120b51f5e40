from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterator, Optional, Sequence

from src.campus_admin.campus_admin.admin.model import AcademicYear, Department
from src.campus_admin.campus_admin.announcements.model import Announcement, ReadReceipt
from src.campus_admin.campus_admin.assignments.model import Assignment
from src.campus_admin.campus_admin.attendance.model import Attendance
from src.campus_admin.campus_admin.common.pagination import Page, PageRequest, paginate
from src.campus_admin.campus_admin.container import Repositories
from src.campus_admin.campus_admin.core.enums import (
    CourseStatus,
    Designation,
    EnrollmentStatus,
    FacultyStatus,
    Role,
    StudentStatus,
    SubmissionType,
    Term,
)
from src.campus_admin.campus_admin.core.exceptions import ConflictError, StoreUnavailable
from src.campus_admin.campus_admin.core.policy import Requester
from src.campus_admin.campus_admin.courses.model import Course
from src.campus_admin.campus_admin.faculty.model import Faculty
from src.campus_admin.campus_admin.grading.model import Grade
from src.campus_admin.campus_admin.students.model import Student, StudentCourse
from src.campus_admin.campus_admin.submissions.model import Submission
from src.campus_admin.campus_admin.users.model import User


def _sorted_page(items: list, page: PageRequest, default: str) -> Page:
    key = page.sort or default
    items = sorted(items, key=lambda x: (getattr(x, key) is None, getattr(x, key)), reverse=page.descending)
    return paginate(items, page)


class _Table:
    """Id-keyed rows with an auto-increment counter."""

    def __init__(self):
        self.rows: dict[int, object] = {}
        self._id = 0

    def next_id(self) -> int:
        self._id += 1
        return self._id


class InMemoryUsers:
    def __init__(self):
        self._t = _Table()

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._t.rows.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._t.rows.values() if u.username == username), None)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._t.rows.values() if u.email == email), None)

    def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        return next((u for u in self._t.rows.values() if u.reset_token_hash == token_hash), None)

    def add(self, user: User) -> int:
        uid = self._t.next_id()
        self._t.rows[uid] = replace(user, user_id=uid)
        return uid

    def update(self, user: User) -> None:
        self._t.rows[user.user_id] = user

    def delete(self, user_id: int) -> bool:
        return self._t.rows.pop(int(user_id), None) is not None

    def list_page(self, *, role: Optional[Role], page: PageRequest) -> Page[User]:
        items = [u for u in self._t.rows.values() if role is None or u.role == role]
        return _sorted_page(items, page, "user_id")


class InMemoryStudents:
    def __init__(self, enrollments: dict):
        self._t = _Table()
        self._enrollments = enrollments
        self.courses: Optional[InMemoryCourses] = None

    def get(self, student_id: int) -> Optional[Student]:
        return self._t.rows.get(int(student_id))

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        return next((s for s in self._t.rows.values() if s.roll_number == roll_number), None)

    def add(self, student: Student) -> int:
        sid = self._t.next_id()
        self._t.rows[sid] = replace(student, student_id=sid)
        return sid

    def update(self, student: Student) -> None:
        self._t.rows[student.student_id] = student

    def delete(self, student_id: int) -> bool:
        return self._t.rows.pop(int(student_id), None) is not None

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[StudentStatus] = None,
        page: PageRequest,
    ) -> Page[Student]:
        items = [
            s
            for s in self._t.rows.values()
            if (department is None or s.department == department) and (status is None or s.status == status)
        ]
        return _sorted_page(items, page, "student_id")

    def list_courses(self, student_id: int) -> Sequence[StudentCourse]:
        out = []
        for (sid, cid), (status, at) in sorted(list(self._enrollments.items())):
            if sid != student_id:
                continue
            course = self.courses.get(cid) if self.courses else None
            out.append(
                StudentCourse(
                    student_id=sid,
                    course_id=cid,
                    status=status,
                    enrolled_at=at,
                    course_code=course.code if course else None,
                    course_name=course.name if course else None,
                )
            )
        return out


class InMemoryFaculty:
    def __init__(self):
        self._t = _Table()

    def get(self, faculty_id: int) -> Optional[Faculty]:
        return self._t.rows.get(int(faculty_id))

    def get_by_email(self, email: str) -> Optional[Faculty]:
        return next((f for f in self._t.rows.values() if f.email == email), None)

    def get_by_code(self, faculty_code: str) -> Optional[Faculty]:
        return next((f for f in self._t.rows.values() if f.faculty_code == faculty_code), None)

    def add(self, faculty: Faculty) -> int:
        fid = self._t.next_id()
        self._t.rows[fid] = replace(faculty, faculty_id=fid)
        return fid

    def update(self, faculty: Faculty) -> None:
        self._t.rows[faculty.faculty_id] = faculty

    def delete(self, faculty_id: int) -> bool:
        return self._t.rows.pop(int(faculty_id), None) is not None

    def list_page(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[FacultyStatus] = None,
        page: PageRequest,
    ) -> Page[Faculty]:
        items = [
            f
            for f in self._t.rows.values()
            if (department is None or f.department == department) and (status is None or f.status == status)
        ]
        return _sorted_page(items, page, "faculty_id")


class InMemoryRoster:
    """Working copy of one course's roster; written back only on a clean exit."""

    def __init__(self, course: Course):
        self.course = course
        self.enrolled_ids = list(course.enrolled_ids)
        self.waitlist_ids = list(course.waitlist_ids)
        self.capacity = course.capacity
        self.entry_changes: dict[int, tuple[EnrollmentStatus, datetime]] = {}

    def add_enrolled(self, student_id: int, *, at: datetime) -> None:
        self.enrolled_ids.append(student_id)
        self.entry_changes[student_id] = (EnrollmentStatus.ENROLLED, at)

    def add_waitlisted(self, student_id: int, *, at: datetime) -> int:
        self.waitlist_ids.append(student_id)
        return len(self.waitlist_ids)

    def remove_enrolled(self, student_id: int, *, at: datetime) -> None:
        self.enrolled_ids.remove(student_id)
        self.entry_changes[student_id] = (EnrollmentStatus.DROPPED, at)

    def pop_waitlist_head(self) -> Optional[int]:
        return self.waitlist_ids.pop(0) if self.waitlist_ids else None

    def set_capacity(self, capacity: int) -> None:
        self.capacity = capacity


class InMemoryCourses:
    """Course store with a per-course lock, mirroring ``SELECT ... FOR UPDATE``.

    ``lock_timeout`` bounds the wait for a course lock; ``fail_commit`` makes the
    next roster write fail as if the database dropped the transaction.
    """

    def __init__(self, enrollments: dict, *, lock_timeout: float = 2.0):
        self._t = _Table()
        self._enrollments = enrollments
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}
        self.lock_timeout = lock_timeout
        self.fail_commit = False

    def get(self, course_id: int) -> Optional[Course]:
        return self._t.rows.get(int(course_id))

    def get_by_code(self, code: str) -> Optional[Course]:
        return next((c for c in self._t.rows.values() if c.code == code), None)

    def add(self, course: Course) -> int:
        cid = self._t.next_id()
        self._t.rows[cid] = replace(course, course_id=cid, enrolled_ids=(), waitlist_ids=())
        return cid

    def update(self, course: Course) -> None:
        current = self._t.rows[course.course_id]
        self._t.rows[course.course_id] = replace(
            course,
            capacity=current.capacity,
            enrolled_ids=current.enrolled_ids,
            waitlist_ids=current.waitlist_ids,
        )

    def delete(self, course_id: int) -> bool:
        return self._t.rows.pop(int(course_id), None) is not None

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
        items = [
            c
            for c in self._t.rows.values()
            if (department is None or c.department == department)
            and (faculty_id is None or c.faculty_id == faculty_id)
            and (status is None or c.status == status)
            and (term is None or c.term == term)
            and (year is None or c.year == year)
        ]
        return _sorted_page(items, page, "course_id")

    def list_by_faculty(self, faculty_id: int) -> Sequence[Course]:
        return [c for c in self._t.rows.values() if c.faculty_id == faculty_id]

    def list_for_student(self, student_id: int) -> Sequence[Course]:
        return [c for c in self._t.rows.values() if student_id in c.enrolled_ids]

    def completed_course_ids(self, student_id: int) -> set[int]:
        done = set()
        for (sid, cid), (status, _) in list(self._enrollments.items()):
            if sid != student_id:
                continue
            course = self._t.rows.get(cid)
            if status == EnrollmentStatus.COMPLETED:
                done.add(cid)
            elif status == EnrollmentStatus.ENROLLED and course and course.status == CourseStatus.COMPLETED:
                done.add(cid)
        return done

    def mark_enrollments_completed(self, course_id: int, *, at: datetime) -> int:
        n = 0
        for key, (status, _) in list(self._enrollments.items()):
            if key[1] == course_id and status == EnrollmentStatus.ENROLLED:
                self._enrollments[key] = (EnrollmentStatus.COMPLETED, at)
                n += 1
        return n

    def _lock_for(self, course_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(course_id, threading.Lock())

    @contextmanager
    def lock_roster(self, course_id: int) -> Iterator[Optional[InMemoryRoster]]:
        lock = self._lock_for(int(course_id))
        if not lock.acquire(timeout=self.lock_timeout):
            raise StoreUnavailable("Store is busy, please retry", context={"lock": "course"})
        try:
            course = self._t.rows.get(int(course_id))
            if course is None:
                yield None
                return
            roster = InMemoryRoster(course)
            yield roster
            self._commit(roster)
        finally:
            lock.release()

    def _commit(self, roster: InMemoryRoster) -> None:
        if self.fail_commit:
            self.fail_commit = False
            raise StoreUnavailable(context={"errno": 2013})
        cid = roster.course.course_id
        self._t.rows[cid] = replace(
            self._t.rows[cid],
            capacity=roster.capacity,
            enrolled_ids=tuple(roster.enrolled_ids),
            waitlist_ids=tuple(roster.waitlist_ids),
        )
        for sid, entry in roster.entry_changes.items():
            self._enrollments[(sid, cid)] = entry


class InMemoryAttendance:
    def __init__(self):
        self._t = _Table()

    def get(self, attendance_id: int) -> Optional[Attendance]:
        return self._t.rows.get(int(attendance_id))

    def get_for(self, *, student_id: int, course_id: int, on_date: date) -> Optional[Attendance]:
        return next(
            (
                a
                for a in self._t.rows.values()
                if a.student_id == student_id and a.course_id == course_id and a.date == on_date
            ),
            None,
        )

    def add(self, record: Attendance) -> int:
        if self.get_for(student_id=record.student_id, course_id=record.course_id, on_date=record.date):
            raise ConflictError("Duplicate record")
        aid = self._t.next_id()
        self._t.rows[aid] = replace(record, attendance_id=aid)
        return aid

    def add_many(self, records: Sequence[Attendance]) -> list[int]:
        snapshot = (dict(self._t.rows), self._t._id)
        try:
            return [self.add(r) for r in records]
        except Exception:
            self._t.rows, self._t._id = snapshot
            raise

    def update(self, record: Attendance) -> None:
        self._t.rows[record.attendance_id] = record

    def delete(self, attendance_id: int) -> bool:
        return self._t.rows.pop(int(attendance_id), None) is not None

    def list_by(
        self,
        *,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> Sequence[Attendance]:
        return [
            a
            for a in self._t.rows.values()
            if (student_id is None or a.student_id == student_id)
            and (course_id is None or a.course_id == course_id)
            and (on_date is None or a.date == on_date)
        ]


class InMemoryAssignments:
    def __init__(self):
        self._t = _Table()

    def get(self, assignment_id: int) -> Optional[Assignment]:
        return self._t.rows.get(int(assignment_id))

    def add(self, assignment: Assignment) -> int:
        aid = self._t.next_id()
        self._t.rows[aid] = replace(assignment, assignment_id=aid)
        return aid

    def update(self, assignment: Assignment) -> None:
        self._t.rows[assignment.assignment_id] = assignment

    def delete(self, assignment_id: int) -> bool:
        return self._t.rows.pop(int(assignment_id), None) is not None

    def list_by(self, *, course_id: Optional[int] = None, faculty_id: Optional[int] = None) -> Sequence[Assignment]:
        return [
            a
            for a in self._t.rows.values()
            if (course_id is None or a.course_id == course_id) and (faculty_id is None or a.faculty_id == faculty_id)
        ]


class InMemorySubmissions:
    def __init__(self):
        self._t = _Table()

    def get(self, submission_id: int) -> Optional[Submission]:
        return self._t.rows.get(int(submission_id))

    def get_for(self, *, assignment_id: int, student_id: int) -> Optional[Submission]:
        return next(
            (s for s in self._t.rows.values() if s.assignment_id == assignment_id and s.student_id == student_id),
            None,
        )

    def add(self, submission: Submission) -> int:
        if self.get_for(assignment_id=submission.assignment_id, student_id=submission.student_id):
            raise ConflictError("Duplicate record")
        sid = self._t.next_id()
        self._t.rows[sid] = replace(submission, submission_id=sid)
        return sid

    def update(self, submission: Submission) -> None:
        self._t.rows[submission.submission_id] = submission

    def delete(self, submission_id: int) -> bool:
        return self._t.rows.pop(int(submission_id), None) is not None

    def list_by(self, *, assignment_id: Optional[int] = None, student_id: Optional[int] = None) -> Sequence[Submission]:
        return [
            s
            for s in self._t.rows.values()
            if (assignment_id is None or s.assignment_id == assignment_id)
            and (student_id is None or s.student_id == student_id)
        ]


class InMemoryGrades:
    def __init__(self):
        self._t = _Table()

    def get(self, grade_id: int) -> Optional[Grade]:
        return self._t.rows.get(int(grade_id))

    def get_for(self, *, student_id: int, assignment_id: int) -> Optional[Grade]:
        return next(
            (g for g in self._t.rows.values() if g.student_id == student_id and g.assignment_id == assignment_id),
            None,
        )

    def add(self, grade: Grade) -> int:
        if self.get_for(student_id=grade.student_id, assignment_id=grade.assignment_id):
            raise ConflictError("Duplicate record")
        gid = self._t.next_id()
        self._t.rows[gid] = replace(grade, grade_id=gid)
        return gid

    def update(self, grade: Grade) -> None:
        self._t.rows[grade.grade_id] = grade

    def delete(self, grade_id: int) -> bool:
        return self._t.rows.pop(int(grade_id), None) is not None

    def list_by(
        self,
        *,
        student_id: Optional[int] = None,
        assignment_id: Optional[int] = None,
        course_id: Optional[int] = None,
    ) -> Sequence[Grade]:
        return [
            g
            for g in self._t.rows.values()
            if (student_id is None or g.student_id == student_id)
            and (assignment_id is None or g.assignment_id == assignment_id)
            and (course_id is None or g.course_id == course_id)
        ]


class InMemoryAnnouncements:
    def __init__(self):
        self._t = _Table()

    def get(self, announcement_id: int) -> Optional[Announcement]:
        return self._t.rows.get(int(announcement_id))

    def add(self, announcement: Announcement) -> int:
        aid = self._t.next_id()
        self._t.rows[aid] = replace(announcement, announcement_id=aid)
        return aid

    def update(self, announcement: Announcement) -> None:
        current = self._t.rows[announcement.announcement_id]
        self._t.rows[announcement.announcement_id] = replace(announcement, read_by=current.read_by)

    def delete(self, announcement_id: int) -> bool:
        return self._t.rows.pop(int(announcement_id), None) is not None

    def list_by(self, *, course_id: Optional[int] = None) -> Sequence[Announcement]:
        return [a for a in self._t.rows.values() if course_id is None or a.course_id == course_id]

    def mark_read(self, *, announcement_id: int, user_id: int, at: datetime) -> None:
        ann = self._t.rows[announcement_id]
        if any(r.user_id == user_id for r in ann.read_by):
            return
        self._t.rows[announcement_id] = replace(ann, read_by=ann.read_by + (ReadReceipt(user_id=user_id, read_at=at),))


class InMemoryDepartments:
    def __init__(self):
        self._t = _Table()

    def get(self, department_id: int) -> Optional[Department]:
        return self._t.rows.get(int(department_id))

    def get_by_code(self, code: str) -> Optional[Department]:
        return next((d for d in self._t.rows.values() if d.code == code), None)

    def list_all(self) -> Sequence[Department]:
        return sorted(self._t.rows.values(), key=lambda d: d.name)

    def add(self, department: Department) -> int:
        did = self._t.next_id()
        self._t.rows[did] = replace(department, department_id=did)
        return did

    def update(self, department: Department) -> None:
        self._t.rows[department.department_id] = department

    def delete(self, department_id: int) -> bool:
        return self._t.rows.pop(int(department_id), None) is not None


class InMemoryAcademicYears:
    def __init__(self):
        self._t = _Table()

    def get(self, academic_year_id: int) -> Optional[AcademicYear]:
        return self._t.rows.get(int(academic_year_id))

    def get_by_label(self, label: str) -> Optional[AcademicYear]:
        return next((y for y in self._t.rows.values() if y.label == label), None)

    def list_all(self) -> Sequence[AcademicYear]:
        return sorted(self._t.rows.values(), key=lambda y: y.start_date, reverse=True)

    def _clear_current(self, keep: int) -> None:
        for yid, year in list(self._t.rows.items()):
            if yid != keep and year.is_current:
                self._t.rows[yid] = replace(year, is_current=False)

    def add(self, year: AcademicYear) -> int:
        yid = self._t.next_id()
        self._t.rows[yid] = replace(year, academic_year_id=yid)
        if year.is_current:
            self._clear_current(yid)
        return yid

    def update(self, year: AcademicYear) -> None:
        self._t.rows[year.academic_year_id] = year
        if year.is_current:
            self._clear_current(year.academic_year_id)

    def delete(self, academic_year_id: int) -> bool:
        return self._t.rows.pop(int(academic_year_id), None) is not None


@dataclass
class StaticHealth:
    up: bool = True

    def ping(self) -> bool:
        return self.up


@dataclass
class RecordingMailer:
    fail: bool = False
    sent: list = field(default_factory=list)

    def send(self, *, recipient: str, subject: str, body: str) -> bool:
        if self.fail:
            return False
        self.sent.append((recipient, subject, body))
        return True


def in_memory_repositories(*, lock_timeout: float = 2.0) -> Repositories:
    # (student_id, course_id) -> (status, at), shared by courses and students.
    enrollments: dict = {}
    courses = InMemoryCourses(enrollments, lock_timeout=lock_timeout)
    students = InMemoryStudents(enrollments)
    students.courses = courses
    return Repositories(
        users=InMemoryUsers(),
        students=students,
        faculty=InMemoryFaculty(),
        courses=courses,
        attendance=InMemoryAttendance(),
        assignments=InMemoryAssignments(),
        grades=InMemoryGrades(),
        submissions=InMemorySubmissions(),
        announcements=InMemoryAnnouncements(),
        departments=InMemoryDepartments(),
        academic_years=InMemoryAcademicYears(),
    )


# ---- seed helpers ----
ADMIN = Requester(user_id=1, role=Role.ADMIN)


def as_student(student_id: int, *, user_id: Optional[int] = None) -> Requester:
    return Requester(user_id=user_id or 100 + student_id, role=Role.STUDENT, profile_id=student_id)


def as_faculty(faculty_id: int, *, user_id: Optional[int] = None) -> Requester:
    return Requester(user_id=user_id or 500 + faculty_id, role=Role.FACULTY, profile_id=faculty_id)


def seed_student(repos: Repositories, roll_number: str, *, name: str = "Student", department: str = "CS") -> int:
    return repos.students.add(Student(student_id=0, name=name, roll_number=roll_number, department=department))


def seed_faculty(repos: Repositories, code: str, *, department: str = "CS") -> int:
    return repos.faculty.add(
        Faculty(
            faculty_id=0,
            name=f"Dr {code}",
            email=f"{code.lower()}@campus.test",
            faculty_code=code,
            department=department,
            designation=Designation.LECTURER,
        )
    )


def seed_course(
    repos: Repositories,
    code: str,
    *,
    capacity: int = 30,
    faculty_id: Optional[int] = None,
    prerequisites: tuple[int, ...] = (),
    status: CourseStatus = CourseStatus.ACTIVE,
) -> int:
    return repos.courses.add(
        Course(
            course_id=0,
            code=code,
            name=f"Course {code}",
            department="CS",
            credits=3,
            capacity=capacity,
            term=Term.FALL,
            year=2024,
            status=status,
            faculty_id=faculty_id,
            prerequisites=prerequisites,
        )
    )


def seed_assignment(
    repos: Repositories,
    course_id: int,
    *,
    due_date: datetime,
    total_marks: int = 100,
    faculty_id: Optional[int] = None,
    submission_type: SubmissionType = SubmissionType.BOTH,
) -> int:
    return repos.assignments.add(
        Assignment(
            assignment_id=0,
            course_id=course_id,
            title="Homework",
            due_date=due_date,
            total_marks=total_marks,
            faculty_id=faculty_id,
            submission_type=submission_type,
        )
    )
