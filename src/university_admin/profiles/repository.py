from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import RecentEnrollment, RoleProfile


class ProfileRepository(Protocol):
    """Repository interface shared by the student and teacher stores.

    Implementations raise DuplicateExternalIdError when the external id or
    email unique constraint is violated.
    """

    role: Role

    def get_by_external_id(self, external_id: str) -> Optional[RoleProfile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[RoleProfile]:
        raise NotImplementedError

    def create(self, profile: RoleProfile) -> RoleProfile:
        raise NotImplementedError

    def list_all(self, *, department: Optional[str] = None) -> Sequence[RoleProfile]:
        """Profiles in insertion order, optionally limited to one department."""

        raise NotImplementedError


class StudentRepository(ProfileRepository, Protocol):
    def list_enrolled_in(self, course_codes: Iterable[str]) -> Sequence[RoleProfile]:
        raise NotImplementedError

    def recent_enrollments(self, *, limit: int) -> Sequence[RecentEnrollment]:
        raise NotImplementedError


class TeacherRepository(ProfileRepository, Protocol):
    def delete_by_external_id(self, external_id: str) -> bool:
        raise NotImplementedError
