from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from ..common.validators import normalize_email
from ..core.constants import DEFAULT_RECENT_ACTIVITY_LIMIT, STUDENT_ID_PATTERN, TEACHER_ID_PATTERN
from ..core.enums import Role
from ..core.exceptions import DuplicateExternalIdError, InvalidFormatError, NotFoundError, ValidationError
from .model import RecentEnrollment, RoleProfile
from .repository import ProfileRepository, StudentRepository, TeacherRepository

logger = logging.getLogger(__name__)

EXTERNAL_ID_PATTERNS = {
    Role.STUDENT: (STUDENT_ID_PATTERN, "Student ID must be in format DEPT_STU_XXX (e.g., CS_STU_001)"),
    Role.TEACHER: (TEACHER_ID_PATTERN, "Teacher ID must be in format TXXX (e.g., T001)"),
}


def validate_external_id(role: Role, external_id: str) -> str:
    pattern, message = EXTERNAL_ID_PATTERNS[role]
    value = (external_id or "").strip()
    if not re.match(pattern, value):
        raise InvalidFormatError(message, fields={"externalId": message})
    return value


class ProfileStore:
    """Role-specific profile records for one role (students or teachers)."""

    def __init__(self, role: Role, profiles: ProfileRepository):
        if role not in EXTERNAL_ID_PATTERNS:
            raise ValueError(f"No profile store for role {role.value}")
        self.role = role
        self._profiles = profiles

    def create(self, profile: RoleProfile) -> RoleProfile:
        if profile.role != self.role:
            raise ValidationError(f"Expected a {self.role.value} profile")
        validate_external_id(self.role, profile.external_id)

        if self.exists(external_id=profile.external_id, email=profile.email):
            raise DuplicateExternalIdError(f"{self.role.value.title()} ID or email already registered")

        created = self._profiles.create(profile)
        logger.info("Created %s profile %s", self.role.value, created.external_id)
        return created

    def exists(self, *, external_id: str, email: str) -> bool:
        return bool(self._profiles.get_by_external_id(external_id) or self._profiles.get_by_email(normalize_email(email)))

    def find_by_external_id(self, external_id: str) -> Optional[RoleProfile]:
        return self._profiles.get_by_external_id((external_id or "").strip())

    def find_by_email(self, email: str) -> Optional[RoleProfile]:
        return self._profiles.get_by_email(normalize_email(email))

    def find_all(self, *, department: Optional[str] = None) -> Sequence[RoleProfile]:
        department = (department or "").strip() or None
        return list(self._profiles.list_all(department=department))


class StudentStore(ProfileStore):
    def __init__(self, students: StudentRepository):
        super().__init__(Role.STUDENT, students)
        self._students = students

    def find_enrolled_in(self, course_codes: Iterable[str]) -> Sequence[RoleProfile]:
        return list(self._students.list_enrolled_in(course_codes))

    def recent_enrollments(self, *, limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT) -> Sequence[RecentEnrollment]:
        return list(self._students.recent_enrollments(limit=limit))


class TeacherStore(ProfileStore):
    def __init__(self, teachers: TeacherRepository):
        super().__init__(Role.TEACHER, teachers)
        self._teachers = teachers

    def delete(self, external_id: str) -> RoleProfile:
        """Delete a teacher profile; the caller deletes the paired identity."""
        profile = self.find_by_external_id(external_id)
        if not profile:
            raise NotFoundError("Teacher not found")
        if not self._teachers.delete_by_external_id(profile.external_id):
            raise NotFoundError("Teacher not found")
        return profile
