from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Protocol

from .admin.mysql_academic_year_repository import MySQLAcademicYearRepository
from .admin.mysql_department_repository import MySQLDepartmentRepository
from .admin.repository import AcademicYearRepository, DepartmentRepository
from .admin.service import AcademicYearService, DepartmentService
from .announcements.mysql_announcement_repository import MySQLAnnouncementRepository
from .announcements.repository import AnnouncementRepository
from .announcements.service import AnnouncementService
from .assignments.mysql_assignment_repository import MySQLAssignmentRepository
from .assignments.repository import AssignmentRepository
from .assignments.service import AssignmentService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_JWT_EXP_MINUTES, DEFAULT_RESET_TOKEN_MINUTES
from .courses.enrollment import EnrollmentService
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .faculty.mysql_faculty_repository import MySQLFacultyRepository
from .faculty.repository import FacultyRepository
from .faculty.service import FacultyService
from .grading.mysql_grade_repository import MySQLGradeRepository
from .grading.repository import GradeRepository
from .grading.service import GradingService
from .notifications.mailer import Mailer
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .submissions.mysql_submission_repository import MySQLSubmissionRepository
from .submissions.repository import SubmissionRepository
from .submissions.service import SubmissionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.security import TokenIssuer
from .users.service import AuthService, UserService


class HealthCheck(Protocol):
    def ping(self) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    students: StudentRepository
    faculty: FacultyRepository
    courses: CourseRepository
    attendance: AttendanceRepository
    assignments: AssignmentRepository
    grades: GradeRepository
    submissions: SubmissionRepository
    announcements: AnnouncementRepository
    departments: DepartmentRepository
    academic_years: AcademicYearRepository


@dataclass(frozen=True)
class Container:
    health: HealthCheck
    repos: Repositories

    auth_service: AuthService
    user_service: UserService
    student_service: StudentService
    faculty_service: FacultyService
    course_service: CourseService
    enrollment_service: EnrollmentService
    attendance_service: AttendanceService
    assignment_service: AssignmentService
    submission_service: SubmissionService
    grading_service: GradingService
    announcement_service: AnnouncementService
    department_service: DepartmentService
    academic_year_service: AcademicYearService


def assemble(
    repos: Repositories,
    *,
    health: HealthCheck,
    tokens: TokenIssuer,
    mailer: Mailer,
    reset_token_minutes: int = DEFAULT_RESET_TOKEN_MINUTES,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services on top of a set of repositories (MySQL-backed or in-memory)."""
    return Container(
        health=health,
        repos=repos,
        auth_service=AuthService(
            repos.users,
            repos.students,
            repos.faculty,
            tokens,
            mailer,
            reset_token_minutes=reset_token_minutes,
            clock=clock,
        ),
        user_service=UserService(repos.users),
        student_service=StudentService(repos.students),
        faculty_service=FacultyService(repos.faculty, repos.courses),
        course_service=CourseService(repos.courses, repos.faculty, repos.students, clock=clock),
        enrollment_service=EnrollmentService(repos.courses, repos.students, clock=clock),
        attendance_service=AttendanceService(repos.attendance, repos.courses, repos.students),
        assignment_service=AssignmentService(repos.assignments, repos.courses, repos.faculty),
        submission_service=SubmissionService(repos.submissions, repos.assignments, repos.courses, clock=clock),
        grading_service=GradingService(
            repos.grades, repos.assignments, repos.students, repos.courses, repos.submissions, clock=clock
        ),
        announcement_service=AnnouncementService(repos.announcements, repos.courses, clock=clock),
        department_service=DepartmentService(repos.departments, repos.faculty),
        academic_year_service=AcademicYearService(repos.academic_years),
    )


def build_container(
    *,
    db_config: dict[str, Any],
    jwt_secret: str,
    mailer: Mailer,
    jwt_exp_minutes: int = DEFAULT_JWT_EXP_MINUTES,
    reset_token_minutes: int = DEFAULT_RESET_TOKEN_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        students=MySQLStudentRepository(conn),
        faculty=MySQLFacultyRepository(conn),
        courses=MySQLCourseRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        assignments=MySQLAssignmentRepository(conn),
        grades=MySQLGradeRepository(conn),
        submissions=MySQLSubmissionRepository(conn),
        announcements=MySQLAnnouncementRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        academic_years=MySQLAcademicYearRepository(conn),
    )
    return assemble(
        repos,
        health=conn,
        tokens=TokenIssuer(secret=jwt_secret, expires_minutes=jwt_exp_minutes),
        mailer=mailer,
        reset_token_minutes=reset_token_minutes,
    )
