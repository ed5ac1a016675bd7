from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.enums import EnrollmentStatus, Gender, ProfileStatus, Role, Semester
from ..core.exceptions import DuplicateExternalIdError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import EnrollmentRecord, RecentEnrollment, RoleProfile, StudentDetails
from .repository import StudentRepository

_COLUMNS = """
    s.external_id, s.display_name, s.email, s.phone, s.department, s.password_hash, s.status,
    s.region, s.grade_level, s.gender, s.batch, s.semester, s.registration_date
"""


def _row_to_profile(r: dict, enrollments: List[EnrollmentRecord]) -> RoleProfile:
    return RoleProfile(
        role=Role.STUDENT,
        external_id=r["external_id"],
        display_name=r["display_name"],
        email=r["email"],
        department=r["department"],
        phone=r["phone"],
        password_hash=r["password_hash"],
        status=ProfileStatus(r["status"]),
        details=StudentDetails(
            region=r["region"],
            grade_level=str(r["grade_level"]),
            gender=Gender(r["gender"]),
            batch=r["batch"],
            semester=Semester(r["semester"]),
            registration_date=r["registration_date"],
            enrollments=tuple(enrollments),
        ),
    )


class MySQLStudentRepository(StudentRepository):
    role = Role.STUDENT

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_enrollments(self, cur, external_ids: Sequence[str]) -> Dict[str, List[EnrollmentRecord]]:
        out: Dict[str, List[EnrollmentRecord]] = defaultdict(list)
        if not external_ids:
            return out
        cur.execute(
            f"""
            SELECT student_external_id, course_code, enrolled_at, status
            FROM student_enrollments
            WHERE student_external_id IN ({placeholders(len(external_ids))})
            ORDER BY enrollment_id
            """,
            tuple(external_ids),
        )
        for r in fetchall(cur):
            out[r["student_external_id"]].append(
                EnrollmentRecord(
                    course_code=r["course_code"],
                    enrolled_at=r["enrolled_at"],
                    status=EnrollmentStatus(r["status"]),
                )
            )
        return out

    def _hydrate(self, cur, rows: List[dict]) -> List[RoleProfile]:
        enrollments = self._load_enrollments(cur, [r["external_id"] for r in rows])
        return [_row_to_profile(r, enrollments.get(r["external_id"], [])) for r in rows]

    def _get_one(self, where: str, value: str) -> Optional[RoleProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students s WHERE {where}=%s", (value,))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def get_by_external_id(self, external_id: str) -> Optional[RoleProfile]:
        return self._get_one("s.external_id", external_id)

    def get_by_email(self, email: str) -> Optional[RoleProfile]:
        return self._get_one("s.email", email)

    def create(self, profile: RoleProfile) -> RoleProfile:
        d = profile.details
        if not isinstance(d, StudentDetails):
            raise TypeError("student repository only stores student profiles")
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO students(
                        external_id, display_name, email, phone, department, password_hash, status,
                        region, grade_level, gender, batch, semester, registration_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        profile.external_id,
                        profile.display_name,
                        profile.email,
                        profile.phone,
                        profile.department,
                        profile.password_hash,
                        profile.status.value,
                        d.region,
                        d.grade_level,
                        d.gender.value,
                        d.batch,
                        d.semester.value,
                        d.registration_date,
                    ),
                )
                # Same transaction: the profile and its enrollments land together.
                for e in d.enrollments:
                    cur.execute(
                        """
                        INSERT INTO student_enrollments(student_external_id, course_code, enrolled_at, status)
                        VALUES(%s,%s,%s,%s)
                        """,
                        (profile.external_id, e.course_code, e.enrolled_at, e.status.value),
                    )
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateExternalIdError("Student ID or email already registered") from e
            raise
        return profile

    def list_all(self, *, department: Optional[str] = None) -> Sequence[RoleProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            if department:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM students s WHERE s.department=%s ORDER BY s.student_id",
                    (department,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM students s ORDER BY s.student_id")
            return self._hydrate(cur, fetchall(cur))

    def list_enrolled_in(self, course_codes: Iterable[str]) -> Sequence[RoleProfile]:
        codes = sorted(set(course_codes))
        if not codes:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students s
                WHERE EXISTS (
                    SELECT 1 FROM student_enrollments se
                    WHERE se.student_external_id = s.external_id
                      AND se.course_code IN ({placeholders(len(codes))})
                )
                ORDER BY s.student_id
                """,
                tuple(codes),
            )
            return self._hydrate(cur, fetchall(cur))

    def recent_enrollments(self, *, limit: int) -> Sequence[RecentEnrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.display_name, se.course_code, se.status, se.enrolled_at
                FROM student_enrollments se
                JOIN students s ON s.external_id = se.student_external_id
                ORDER BY se.enrolled_at DESC, se.enrollment_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                RecentEnrollment(
                    student_name=r["display_name"],
                    course_code=r["course_code"],
                    status=EnrollmentStatus(r["status"]),
                    enrolled_at=r["enrolled_at"],
                )
                for r in fetchall(cur)
            ]
