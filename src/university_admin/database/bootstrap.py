from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Union

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from ..identities.model import Identity
from .connection import DBConfig, DatabaseConnection

if TYPE_CHECKING:
    from ..container import Container

logger = logging.getLogger(__name__)

DEMO_ADMIN = {"email": "aman@university.com", "name": "aman User", "password": "admin123456"}

DEMO_TEACHER = {
    "externalId": "T001",
    "displayName": "John Doe",
    "department": "Computer Science",
    "email": "john.doe@university.com",
    "phone": "+251912345678",
    "salary": 50000,
    "hireDate": "2023-01-15",
    "position": "Professor",
    "coursesAssigned": ["CS101", "CS202"],
    "status": "Active",
    "password": "teacher123456",
}

DEMO_COURSES = [
    {
        "courseCode": "CS101",
        "courseName": "Introduction to Programming",
        "description": "Fundamentals of programming with a first structured language.",
        "teacherExternalId": "T001",
        "department": "Computer Science",
        "enrolledStudentIds": ["CS_STU_001"],
    },
    {
        "courseCode": "CS202",
        "courseName": "Data Structures",
        "description": "Lists, trees, graphs and the algorithms that work on them.",
        "teacherExternalId": "T001",
        "department": "Computer Science",
        "enrolledStudentIds": ["CS_STU_001"],
    },
]

DEMO_STUDENT = {
    "externalId": "CS_STU_001",
    "displayName": "Jane Smith",
    "email": "jane.smith@university.com",
    "phone": "+251987654321",
    "region": "Addis Ababa",
    "gradeLevel": "3",
    "gender": "Female",
    "enrolledCourses": ["CS101", "CS202"],
    "registrationDate": "2023-09-01",
    "password": "student123456",
    "department": "Computer Science",
    "batch": "2015 E.C.",
    "semester": "Semester 1",
}


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: List[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Union[str, Path]) -> None:
    """Create the database and its tables; every statement is CREATE ... IF NOT EXISTS."""
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    ensure_database_exists(conn_factory)

    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", conn_factory.config.database)


def list_tables(db_config: dict) -> List[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def seed_demo_data(container: "Container") -> List[str]:
    """Insert the demo admin, teacher, courses and student through the services.

    Records that already exist are left alone, so seeding can be repeated.
    Returns what was created.
    """
    created: List[str] = []

    if not container.identity_store.find_by_email(DEMO_ADMIN["email"]):
        container.identity_store.create(
            Identity(
                email=DEMO_ADMIN["email"],
                display_name=DEMO_ADMIN["name"],
                password_hash=generate_password_hash(DEMO_ADMIN["password"]),
                role=Role.ADMIN,
            )
        )
        created.append(f"admin {DEMO_ADMIN['email']}")

    if not container.teacher_store.find_by_external_id(DEMO_TEACHER["externalId"]):
        container.registration.register_teacher(DEMO_TEACHER)
        created.append(f"teacher {DEMO_TEACHER['externalId']}")

    for course in DEMO_COURSES:
        if not container.course_service.get_course(course["courseCode"]):
            container.course_service.create_course(course)
            created.append(f"course {course['courseCode']}")

    if not container.student_store.find_by_external_id(DEMO_STUDENT["externalId"]):
        container.registration.register_student(DEMO_STUDENT)
        created.append(f"student {DEMO_STUDENT['externalId']}")

    logger.info("Demo seed: %s", ", ".join(created) or "nothing new")
    return created
