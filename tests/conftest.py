from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

import pytest

from university_admin.attendance.model import AttendanceKey, AttendanceRecord
from university_admin.container import Container, assemble_container
from university_admin.core.enums import Role
from university_admin.core.exceptions import AlreadyRegisteredError, DuplicateExternalIdError, DuplicateIdentityError
from university_admin.courses.model import Course
from university_admin.database.bootstrap import seed_demo_data
from university_admin.identities.model import Identity
from university_admin.profiles.model import RecentEnrollment, RoleProfile

JWT_SECRET = "test-jwt-secret"


class InMemoryIdentities:
    def __init__(self):
        self._lock = threading.Lock()
        self.rows: dict[str, Identity] = {}
        self.fail_create: Optional[Exception] = None

    def get_by_email(self, email: str) -> Optional[Identity]:
        return self.rows.get(email)

    def create(self, identity: Identity) -> Identity:
        if self.fail_create:
            raise self.fail_create
        with self._lock:
            if identity.email in self.rows:
                raise DuplicateIdentityError(f"Email already registered: {identity.email}")
            self.rows[identity.email] = identity
        return identity

    def update(self, current_email: str, identity: Identity) -> bool:
        with self._lock:
            if current_email not in self.rows:
                return False
            del self.rows[current_email]
            self.rows[identity.email] = identity
        return True

    def update_password_hash(self, email: str, password_hash: str) -> bool:
        with self._lock:
            if email not in self.rows:
                return False
            self.rows[email] = replace(self.rows[email], password_hash=password_hash)
        return True

    def delete_by_email(self, email: str) -> bool:
        with self._lock:
            return self.rows.pop(email, None) is not None


class _InMemoryProfiles:
    role: Role

    def __init__(self):
        self._lock = threading.Lock()
        self.rows: List[RoleProfile] = []
        self.fail_create: Optional[Exception] = None

    def get_by_external_id(self, external_id: str) -> Optional[RoleProfile]:
        return next((p for p in self.rows if p.external_id == external_id), None)

    def get_by_email(self, email: str) -> Optional[RoleProfile]:
        return next((p for p in self.rows if p.email == email), None)

    def create(self, profile: RoleProfile) -> RoleProfile:
        if self.fail_create:
            raise self.fail_create
        with self._lock:
            if self.get_by_external_id(profile.external_id) or self.get_by_email(profile.email):
                raise DuplicateExternalIdError(f"{self.role.value.title()} ID or email already registered")
            self.rows.append(profile)
        return profile

    def list_all(self, *, department: Optional[str] = None) -> List[RoleProfile]:
        return [p for p in self.rows if department is None or p.department == department]


class InMemoryStudents(_InMemoryProfiles):
    role = Role.STUDENT

    def list_enrolled_in(self, course_codes: Iterable[str]) -> List[RoleProfile]:
        codes = set(course_codes)
        return [p for p in self.rows if any(e.course_code in codes for e in p.enrollments)]

    def recent_enrollments(self, *, limit: int) -> List[RecentEnrollment]:
        items = [
            RecentEnrollment(
                student_name=p.display_name,
                course_code=e.course_code,
                status=e.status,
                enrolled_at=e.enrolled_at,
            )
            for p in self.rows
            for e in p.enrollments
        ]
        items.sort(key=lambda i: i.enrolled_at, reverse=True)
        return items[:limit]


class InMemoryTeachers(_InMemoryProfiles):
    role = Role.TEACHER

    def delete_by_external_id(self, external_id: str) -> bool:
        with self._lock:
            before = len(self.rows)
            self.rows = [p for p in self.rows if p.external_id != external_id]
            return len(self.rows) != before


class InMemoryCourses:
    def __init__(self):
        self.rows: dict[str, Course] = {}

    def get_by_code(self, course_code: str) -> Optional[Course]:
        return self.rows.get(course_code)

    def create(self, course: Course) -> Course:
        if course.course_code in self.rows:
            raise AlreadyRegisteredError("Course already registered with this code")
        self.rows[course.course_code] = course
        return course

    def list_all(self, *, department: Optional[str] = None) -> List[Course]:
        return [c for c in self.rows.values() if department is None or c.department == department]

    def list_for_teacher(self, teacher_external_id: str) -> List[Course]:
        return [c for c in self.rows.values() if c.teacher_external_id == teacher_external_id]

    def reassign(self, course_code: str, teacher_external_id: str) -> None:
        self.rows[course_code] = replace(self.rows[course_code], teacher_external_id=teacher_external_id)


class InMemoryAttendance:
    def __init__(self):
        self.rows: dict[AttendanceKey, AttendanceRecord] = {}
        self.upserts = 0

    def upsert(self, record: AttendanceRecord) -> None:
        self.upserts += 1
        self.rows[record.key] = record

    def get(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        return self.rows.get(key)

    def list_for_course(self, course_code, teacher_external_id, attendance_date=None) -> List[AttendanceRecord]:
        return [
            r
            for r in self.rows.values()
            if r.course_code == course_code
            and r.teacher_external_id == teacher_external_id
            and (attendance_date is None or r.attendance_date == attendance_date)
        ]


@dataclass
class Repos:
    identities: InMemoryIdentities = field(default_factory=InMemoryIdentities)
    students: InMemoryStudents = field(default_factory=InMemoryStudents)
    teachers: InMemoryTeachers = field(default_factory=InMemoryTeachers)
    courses: InMemoryCourses = field(default_factory=InMemoryCourses)
    attendance: InMemoryAttendance = field(default_factory=InMemoryAttendance)


@pytest.fixture()
def repos() -> Repos:
    return Repos()


@pytest.fixture()
def container(repos: Repos) -> Container:
    return assemble_container(
        jwt_secret=JWT_SECRET,
        identities_repo=repos.identities,
        students_repo=repos.students,
        teachers_repo=repos.teachers,
        courses_repo=repos.courses,
        attendance_repo=repos.attendance,
    )


@pytest.fixture()
def seeded(container: Container) -> Container:
    """Demo data: admin, teacher T001 with CS101/CS202, student CS_STU_001 in both."""
    seed_demo_data(container)
    return container


def credential_for(container: Container, email: str):
    identity = container.identity_store.get(email)
    return container.credential_service.verify(container.credential_service.issue(identity))


def teacher_payload(**overrides) -> dict:
    data = {
        "externalId": "T002",
        "displayName": "Abebe Kebede",
        "department": "Computer Science",
        "email": "abebe.kebede@university.com",
        "phone": "+251911223344",
        "salary": 42000,
        "hireDate": "2022-09-01",
        "position": "Lecturer",
        "coursesAssigned": [],
        "status": "Active",
        "password": "teacher-pass-2",
    }
    data.update(overrides)
    return data


def student_payload(**overrides) -> dict:
    data = {
        "externalId": "CS_STU_002",
        "displayName": "Hana Tesfaye",
        "email": "hana.tesfaye@university.com",
        "phone": "+251922334455",
        "region": "Amhara",
        "gradeLevel": "2",
        "gender": "Female",
        "enrolledCourses": ["CS101"],
        "registrationDate": "2024-09-01",
        "password": "student-pass-2",
        "department": "Computer Science",
        "batch": "2016 E.C.",
        "semester": "Semester 1",
    }
    data.update(overrides)
    return data
