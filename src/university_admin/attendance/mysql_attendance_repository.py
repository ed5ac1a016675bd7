from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceKey, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "course_code, student_external_id, attendance_date, status, teacher_external_id, department"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        course_code=r["course_code"],
        student_external_id=r["student_external_id"],
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        teacher_external_id=r["teacher_external_id"],
        department=r["department"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    department=VALUES(department)
                """,
                (
                    record.course_code,
                    record.student_external_id,
                    record.attendance_date,
                    record.status.value,
                    record.teacher_external_id,
                    record.department,
                ),
            )

    def get(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE course_code=%s AND student_external_id=%s
                  AND attendance_date=%s AND teacher_external_id=%s
                """,
                (key.course_code, key.student_external_id, key.attendance_date, key.teacher_external_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_course(
        self,
        course_code: str,
        teacher_external_id: str,
        attendance_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        where = ["course_code=%s", "teacher_external_id=%s"]
        params: list = [course_code, teacher_external_id]
        if attendance_date:
            where.append("attendance_date=%s")
            params.append(attendance_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(where)}
                ORDER BY attendance_date, student_external_id
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
