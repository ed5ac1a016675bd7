from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.credentials import CredentialService
from .auth.gate import AccessGate
from .auth.service import AuthService
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .identities.mysql_identity_repository import MySQLIdentityRepository
from .identities.repository import IdentityRepository
from .identities.store import IdentityStore
from .profiles.mysql_student_repository import MySQLStudentRepository
from .profiles.mysql_teacher_repository import MySQLTeacherRepository
from .profiles.repository import StudentRepository, TeacherRepository
from .profiles.store import StudentStore, TeacherStore
from .registration.service import RegistrationOrchestrator


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    credential_service: CredentialService
    access_gate: AccessGate

    identity_store: IdentityStore
    student_store: StudentStore
    teacher_store: TeacherStore

    auth_service: AuthService
    registration: RegistrationOrchestrator
    course_service: CourseService
    attendance_service: AttendanceService


def assemble_container(
    *,
    jwt_secret: str,
    identities_repo: IdentityRepository,
    students_repo: StudentRepository,
    teachers_repo: TeacherRepository,
    courses_repo: CourseRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory)."""
    credential_service = CredentialService(jwt_secret)
    access_gate = AccessGate(credential_service)

    identity_store = IdentityStore(identities_repo)
    student_store = StudentStore(students_repo)
    teacher_store = TeacherStore(teachers_repo)

    return Container(
        conn=conn,
        credential_service=credential_service,
        access_gate=access_gate,
        identity_store=identity_store,
        student_store=student_store,
        teacher_store=teacher_store,
        auth_service=AuthService(identity_store, credential_service),
        registration=RegistrationOrchestrator(identity_store, student_store, teacher_store, courses=courses_repo),
        course_service=CourseService(courses_repo, teacher_store),
        attendance_service=AttendanceService(attendance_repo, courses_repo, student_store, teacher_store),
    )


def build_container(*, db_config: dict, jwt_secret: str) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble_container(
        jwt_secret=jwt_secret,
        identities_repo=MySQLIdentityRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
    )
