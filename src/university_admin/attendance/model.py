from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from ..core.enums import AttendanceStatus
from ..courses.model import Course
from ..profiles.model import RoleProfile


@dataclass(frozen=True)
class AttendanceKey:
    """Natural key of the ledger: one status per student, course, day and teacher."""

    course_code: str
    student_external_id: str
    attendance_date: date
    teacher_external_id: str


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one ledger row. Rows are overwritten, never deleted."""

    course_code: str
    student_external_id: str
    attendance_date: date
    status: AttendanceStatus
    teacher_external_id: str
    department: str

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(
            course_code=self.course_code,
            student_external_id=self.student_external_id,
            attendance_date=self.attendance_date,
            teacher_external_id=self.teacher_external_id,
        )


@dataclass(frozen=True)
class AttendanceMark:
    """One validated entry of a submitted batch."""

    student_external_id: str
    status: AttendanceStatus


@dataclass(frozen=True)
class Roster:
    """Read-model: a teacher's courses and the students enrolled in them."""

    courses: Tuple[Course, ...]
    students: Tuple[RoleProfile, ...]
