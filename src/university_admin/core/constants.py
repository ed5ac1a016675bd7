"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

CREDENTIAL_TTL = timedelta(hours=1)
CREDENTIAL_ALGORITHM = "HS256"

MIN_ACCOUNT_PASSWORD_LENGTH = 6
MIN_PROFILE_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MIN_COURSE_CODE_LENGTH = 4
MIN_COURSE_DESCRIPTION_LENGTH = 10

STUDENT_ID_PATTERN = r"^[A-Z]{2,4}_STU_\d{3}$"
TEACHER_ID_PATTERN = r"^T\d{3}$"
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
STUDENT_PHONE_PATTERN = r"^\+?\d{10,15}$"
TEACHER_PHONE_PATTERN = r"^\+?\d{10,12}$"

GRADE_LEVELS = ("1", "2", "3", "4", "5")

DEFAULT_RECENT_ACTIVITY_LIMIT = 5
