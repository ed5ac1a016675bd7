from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Course:
    """Domain entity: a course and the teacher assigned to it."""

    course_code: str
    course_name: str
    description: str
    teacher_external_id: str
    department: str
    enrolled_student_ids: Tuple[str, ...] = ()
