from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from ..core.exceptions import AlreadyRegisteredError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import Course
from .repository import CourseRepository

_COLUMNS = "course_code, course_name, description, teacher_external_id, department"


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _hydrate(self, cur, rows: List[dict]) -> List[Course]:
        students: Dict[str, List[str]] = defaultdict(list)
        codes = [r["course_code"] for r in rows]
        if codes:
            cur.execute(
                f"""
                SELECT course_code, student_external_id
                FROM course_students
                WHERE course_code IN ({placeholders(len(codes))})
                ORDER BY position
                """,
                tuple(codes),
            )
            for r in fetchall(cur):
                students[r["course_code"]].append(r["student_external_id"])

        return [
            Course(
                course_code=r["course_code"],
                course_name=r["course_name"],
                description=r["description"],
                teacher_external_id=r["teacher_external_id"],
                department=r["department"],
                enrolled_student_ids=tuple(students.get(r["course_code"], [])),
            )
            for r in rows
        ]

    def get_by_code(self, course_code: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses WHERE course_code=%s", (course_code,))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def create(self, course: Course) -> Course:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO courses({_COLUMNS}) VALUES(%s,%s,%s,%s,%s)",
                    (
                        course.course_code,
                        course.course_name,
                        course.description,
                        course.teacher_external_id,
                        course.department,
                    ),
                )
                for position, student_id in enumerate(course.enrolled_student_ids):
                    cur.execute(
                        """
                        INSERT INTO course_students(course_code, student_external_id, position)
                        VALUES(%s,%s,%s)
                        """,
                        (course.course_code, student_id, position),
                    )
        except Exception as e:
            if is_duplicate_key(e):
                raise AlreadyRegisteredError("Course already registered with this code") from e
            raise
        return course

    def list_all(self, *, department: Optional[str] = None) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            if department:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM courses WHERE department=%s ORDER BY course_id",
                    (department,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM courses ORDER BY course_id")
            return self._hydrate(cur, fetchall(cur))

    def list_for_teacher(self, teacher_external_id: str) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM courses WHERE teacher_external_id=%s ORDER BY course_id",
                (teacher_external_id,),
            )
            return self._hydrate(cur, fetchall(cur))
