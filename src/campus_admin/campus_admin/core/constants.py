"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

DEFAULT_JWT_EXP_MINUTES = 60 * 24
DEFAULT_RESET_TOKEN_MINUTES = 10
DEFAULT_LOCK_WAIT_SECONDS = 5
MIN_PASSWORD_LENGTH = 6

COURSE_CODE_MAX = 20
COURSE_NAME_MAX = 50
COURSE_DESCRIPTION_MAX = 500
COURSE_SYLLABUS_MAX = 5000
MIN_CREDITS = 1
MAX_CREDITS = 6

TITLE_MAX = 100

NOT_GRADED = "Not Graded"
