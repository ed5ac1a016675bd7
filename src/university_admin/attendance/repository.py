from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceKey, AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(self, record: AttendanceRecord) -> None:
        """Insert the record or overwrite status/department of the row with the same key."""

        raise NotImplementedError

    def get(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_course(
        self,
        course_code: str,
        teacher_external_id: str,
        attendance_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
