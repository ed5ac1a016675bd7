from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set

from ..core.enums import Position, ProfileStatus, Role
from ..core.exceptions import DuplicateExternalIdError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import RoleProfile, TeacherDetails
from .repository import TeacherRepository

_COLUMNS = """
    t.external_id, t.display_name, t.email, t.phone, t.department, t.password_hash, t.status,
    t.salary, t.hire_date, t.position
"""


class MySQLTeacherRepository(TeacherRepository):
    role = Role.TEACHER

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_courses(self, cur, external_ids: Sequence[str]) -> Dict[str, Set[str]]:
        out: Dict[str, Set[str]] = defaultdict(set)
        if not external_ids:
            return out
        cur.execute(
            f"""
            SELECT teacher_external_id, course_code
            FROM teacher_courses
            WHERE teacher_external_id IN ({placeholders(len(external_ids))})
            """,
            tuple(external_ids),
        )
        for r in fetchall(cur):
            out[r["teacher_external_id"]].add(r["course_code"])
        return out

    def _hydrate(self, cur, rows: List[dict]) -> List[RoleProfile]:
        courses = self._load_courses(cur, [r["external_id"] for r in rows])
        return [
            RoleProfile(
                role=Role.TEACHER,
                external_id=r["external_id"],
                display_name=r["display_name"],
                email=r["email"],
                department=r["department"],
                phone=r["phone"],
                password_hash=r["password_hash"],
                status=ProfileStatus(r["status"]),
                details=TeacherDetails(
                    salary=float(r["salary"]),
                    hire_date=r["hire_date"],
                    position=Position(r["position"]),
                    assigned_courses=frozenset(courses.get(r["external_id"], set())),
                ),
            )
            for r in rows
        ]

    def _get_one(self, where: str, value: str) -> Optional[RoleProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers t WHERE {where}=%s", (value,))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def get_by_external_id(self, external_id: str) -> Optional[RoleProfile]:
        return self._get_one("t.external_id", external_id)

    def get_by_email(self, email: str) -> Optional[RoleProfile]:
        return self._get_one("t.email", email)

    def create(self, profile: RoleProfile) -> RoleProfile:
        d = profile.details
        if not isinstance(d, TeacherDetails):
            raise TypeError("teacher repository only stores teacher profiles")
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO teachers(
                        external_id, display_name, email, phone, department, password_hash, status,
                        salary, hire_date, position
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        profile.external_id,
                        profile.display_name,
                        profile.email,
                        profile.phone,
                        profile.department,
                        profile.password_hash,
                        profile.status.value,
                        d.salary,
                        d.hire_date,
                        d.position.value,
                    ),
                )
                for code in sorted(d.assigned_courses):
                    cur.execute(
                        "INSERT INTO teacher_courses(teacher_external_id, course_code) VALUES(%s,%s)",
                        (profile.external_id, code),
                    )
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateExternalIdError("Teacher ID or email already registered") from e
            raise
        return profile

    def list_all(self, *, department: Optional[str] = None) -> Sequence[RoleProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            if department:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM teachers t WHERE t.department=%s ORDER BY t.teacher_id",
                    (department,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM teachers t ORDER BY t.teacher_id")
            return self._hydrate(cur, fetchall(cur))

    def delete_by_external_id(self, external_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teachers WHERE external_id=%s", (external_id,))
            return cur.rowcount > 0
