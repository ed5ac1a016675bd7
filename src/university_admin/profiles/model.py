from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import FrozenSet, Iterable, Tuple, Union

from ..core.enums import EnrollmentStatus, Gender, Position, ProfileStatus, Role, Semester


@dataclass(frozen=True)
class EnrollmentRecord:
    course_code: str
    enrolled_at: datetime
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED


@dataclass(frozen=True)
class StudentDetails:
    region: str
    grade_level: str
    gender: Gender
    batch: str
    semester: Semester
    registration_date: date
    enrollments: Tuple[EnrollmentRecord, ...] = ()


@dataclass(frozen=True)
class TeacherDetails:
    salary: float
    hire_date: date
    position: Position
    assigned_courses: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class RoleProfile:
    """Domain entity: the role-specific record of a person.

    The role is a closed tag; `details` carries the payload for that tag
    (StudentDetails for students, TeacherDetails for teachers). The profile
    points back to its Identity through `email`.
    """

    role: Role
    external_id: str
    display_name: str
    email: str
    department: str
    phone: str
    password_hash: str
    status: ProfileStatus
    details: Union[StudentDetails, TeacherDetails]

    @property
    def enrollments(self) -> Tuple[EnrollmentRecord, ...]:
        if isinstance(self.details, StudentDetails):
            return self.details.enrollments
        return ()

    def is_enrolled_in(self, course_code: str) -> bool:
        return any(e.course_code == course_code for e in self.enrollments)

    def with_enrollments_limited_to(self, course_codes: Iterable[str]) -> "RoleProfile":
        """Copy of a student profile showing only the enrollments in course_codes."""
        if not isinstance(self.details, StudentDetails):
            return self
        codes = set(course_codes)
        kept = tuple(e for e in self.details.enrollments if e.course_code in codes)
        return replace(self, details=replace(self.details, enrollments=kept))


@dataclass(frozen=True)
class RecentEnrollment:
    """Read-model for the admin activity feed."""

    student_name: str
    course_code: str
    status: EnrollmentStatus
    enrolled_at: datetime
