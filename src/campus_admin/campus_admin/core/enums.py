from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles."""

    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"


class StudentStatus(str, Enum):
    """Student lifecycle status."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    GRADUATED = "Graduated"


class EnrollmentStatus(str, Enum):
    """Status of a course entry on a student's record."""

    ENROLLED = "enrolled"
    COMPLETED = "completed"
    DROPPED = "dropped"


class FacultyStatus(str, Enum):
    """Faculty employment status."""

    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    SABBATICAL = "Sabbatical"


class Designation(str, Enum):
    PROFESSOR = "Professor"
    ASSOCIATE_PROFESSOR = "Associate Professor"
    ASSISTANT_PROFESSOR = "Assistant Professor"
    LECTURER = "Lecturer"


class CourseStatus(str, Enum):
    """Course lifecycle status. Completed courses have finalized grades."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class Term(str, Enum):
    FALL = "Fall"
    SPRING = "Spring"
    SUMMER = "Summer"
    WINTER = "Winter"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class EnrollmentOutcome(str, Enum):
    """Result of an enrollment request."""

    ENROLLED = "Enrolled"
    WAITLISTED = "Waitlisted"


class AttendanceStatus(str, Enum):
    """Attendance mark for one class meeting."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class SubmissionType(str, Enum):
    FILE = "file"
    TEXT = "text"
    BOTH = "both"


class AssignmentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class SubmissionStatus(str, Enum):
    """Submission state. LATE is decided when the submission is written."""

    SUBMITTED = "submitted"
    LATE = "late"
    GRADED = "graded"
    RETURNED = "returned"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Audience(str, Enum):
    """Who an announcement is addressed to."""

    ALL = "all"
    STUDENTS = "students"
    FACULTY = "faculty"
    COURSE = "specific-course"


class AnnouncementStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
