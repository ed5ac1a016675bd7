from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of account roles used for access control."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    ABSENT_WITH_APOLOGY = "Absent with Apology"


class EnrollmentStatus(str, Enum):
    ENROLLED = "Enrolled"
    COMPLETED = "Completed"
    DROPPED = "Dropped"


class ProfileStatus(str, Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    RETIRED = "Retired"


class Position(str, Enum):
    PROFESSOR = "Professor"
    ASSOCIATE_PROFESSOR = "Associate Professor"
    ASSISTANT_PROFESSOR = "Assistant Professor"
    LECTURER = "Lecturer"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Semester(str, Enum):
    FIRST = "Semester 1"
    SECOND = "Semester 2"


class Language(str, Enum):
    ENGLISH = "English"
    AMHARIC = "Amharic"
    UNSET = ""


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class TimeZone(str, Enum):
    ADDIS_ABABA = "Africa/Addis_Ababa"
    UTC = "UTC"
    NEW_YORK = "America/New_York"
    LONDON = "Europe/London"
    UNSET = ""
