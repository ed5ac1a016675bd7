from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course


class CourseRepository(Protocol):
    def get_by_code(self, course_code: str) -> Optional[Course]:
        raise NotImplementedError

    def create(self, course: Course) -> Course:
        """Raises AlreadyRegisteredError on a duplicate course code."""

        raise NotImplementedError

    def list_all(self, *, department: Optional[str] = None) -> Sequence[Course]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_external_id: str) -> Sequence[Course]:
        raise NotImplementedError
