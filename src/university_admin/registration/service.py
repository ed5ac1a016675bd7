"""Registration of a person as an identity + role profile pair.

The pair is one logical unit but two independent writes. Uniqueness is
checked up front and enforced again by the storage unique constraints, which
decide concurrent races. There is no cross-store transaction: when only one of the two
creates lands, nothing is rolled back and the caller gets a
PartialRegistrationFailure to reconcile by hand.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Tuple, TypeVar

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import FieldErrors, normalize_email
from ..core.constants import (
    EMAIL_PATTERN,
    GRADE_LEVELS,
    MIN_NAME_LENGTH,
    MIN_PROFILE_PASSWORD_LENGTH,
    STUDENT_ID_PATTERN,
    STUDENT_PHONE_PATTERN,
    TEACHER_ID_PATTERN,
    TEACHER_PHONE_PATTERN,
)
from ..core.enums import Gender, Position, ProfileStatus, Role, Semester
from ..core.exceptions import AlreadyRegisteredError, PartialRegistrationFailure
from ..courses.repository import CourseRepository
from ..identities.model import Identity
from ..identities.store import IdentityStore
from ..profiles.model import EnrollmentRecord, RoleProfile, StudentDetails, TeacherDetails
from ..profiles.store import ProfileStore, StudentStore, TeacherStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Registration:
    identity: Identity
    profile: RoleProfile


def _outcome(future: "Future[T]") -> Tuple[Optional[T], Optional[Exception]]:
    try:
        return future.result(), None
    except Exception as e:
        return None, e


def _course_codes(errors: FieldErrors, data: Mapping[str, Any], field_name: str, *, required: bool) -> Tuple[str, ...]:
    raw = data.get(field_name)
    if raw is None and not required:
        return ()
    if not isinstance(raw, list) or not all(isinstance(c, str) and c.strip() for c in raw):
        errors.add(field_name, "must be a list of course codes")
        return ()
    codes = tuple(dict.fromkeys(c.strip() for c in raw))
    if required and not codes:
        errors.add(field_name, "at least one course must be selected")
    return codes


class RegistrationOrchestrator:
    """The only writer allowed to create an identity together with its profile."""

    def __init__(
        self,
        identities: IdentityStore,
        students: StudentStore,
        teachers: TeacherStore,
        *,
        courses: Optional[CourseRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._identities = identities
        self._students = students
        self._teachers = teachers
        self._courses = courses
        self._clock = clock or now_local

    # Validation

    def _common_fields(self, errors: FieldErrors, data: Mapping[str, Any], id_pattern: str, id_message: str) -> dict:
        return {
            "external_id": errors.matches(data, "externalId", id_pattern, id_message),
            "display_name": errors.text(data, "displayName", min_len=MIN_NAME_LENGTH),
            "email": normalize_email(errors.matches(data, "email", EMAIL_PATTERN, "invalid email format")),
            "department": errors.text(data, "department"),
        }

    def _validate_student(self, data: Mapping[str, Any]) -> Tuple[RoleProfile, str]:
        errors = FieldErrors()
        common = self._common_fields(
            errors, data, STUDENT_ID_PATTERN, "Student ID must be in format DEPT_STU_XXX (e.g., CS_STU_001)"
        )
        phone = errors.matches(data, "phone", STUDENT_PHONE_PATTERN, "invalid phone number")
        region = errors.text(data, "region")
        grade_level = errors.text(data, "gradeLevel")
        if grade_level and grade_level not in GRADE_LEVELS:
            errors.add("gradeLevel", f"must be one of: {', '.join(GRADE_LEVELS)}")
        gender = errors.choice(data, "gender", Gender)
        batch = errors.text(data, "batch")
        semester = errors.choice(data, "semester", Semester)
        registration_date = errors.iso_date(data, "registrationDate")
        courses = _course_codes(errors, data, "enrolledCourses", required=True)
        status = ProfileStatus.ACTIVE
        if data.get("status"):
            status = errors.choice(data, "status", ProfileStatus) or status
        password = errors.password(data, "password", min_len=MIN_PROFILE_PASSWORD_LENGTH)
        errors.raise_if_any("Invalid student registration")

        enrolled_at = self._clock()
        profile = RoleProfile(
            role=Role.STUDENT,
            phone=phone,
            password_hash="",
            status=status,
            details=StudentDetails(
                region=region,
                grade_level=grade_level,
                gender=gender,
                batch=batch,
                semester=semester,
                registration_date=registration_date,
                enrollments=tuple(EnrollmentRecord(course_code=c, enrolled_at=enrolled_at) for c in courses),
            ),
            **common,
        )
        return profile, password

    def _validate_teacher(self, data: Mapping[str, Any]) -> Tuple[RoleProfile, str]:
        errors = FieldErrors()
        common = self._common_fields(errors, data, TEACHER_ID_PATTERN, "Teacher ID must be in format TXXX (e.g., T001)")
        phone = errors.matches(data, "phone", TEACHER_PHONE_PATTERN, "phone number must be 10-12 digits")
        salary = errors.positive_number(data, "salary")
        hire_date = errors.iso_date(data, "hireDate")
        position = errors.choice(data, "position", Position)
        status = errors.choice(data, "status", ProfileStatus)
        courses = _course_codes(errors, data, "coursesAssigned", required=False)
        password = errors.password(data, "password", min_len=MIN_PROFILE_PASSWORD_LENGTH)
        errors.raise_if_any("Invalid teacher registration")

        profile = RoleProfile(
            role=Role.TEACHER,
            phone=phone,
            password_hash="",
            status=status,
            details=TeacherDetails(
                salary=salary,
                hire_date=hire_date,
                position=position,
                assigned_courses=frozenset(courses),
            ),
            **common,
        )
        return profile, password

    # Use cases

    def register_student(self, data: Mapping[str, Any]) -> Registration:
        profile, password = self._validate_student(data)
        return self._register(self._students, profile, password)

    def register_teacher(self, data: Mapping[str, Any]) -> Registration:
        profile, password = self._validate_teacher(data)
        return self._register(self._teachers, profile, password)

    def deregister_teacher(self, external_id: str) -> RoleProfile:
        """Delete a teacher profile and its account.

        Courses still pointing at the teacher are left as they are and logged
        for an admin to reassign.
        """
        profile = self._teachers.delete(external_id)
        if not self._identities.delete(profile.email):
            logger.warning("Teacher %s had no account for %s", profile.external_id, profile.email)
        if self._courses is not None:
            orphaned = [c.course_code for c in self._courses.list_for_teacher(profile.external_id)]
            if orphaned:
                logger.warning(
                    "Teacher %s deregistered with courses still assigned: %s",
                    profile.external_id,
                    ", ".join(orphaned),
                )
        logger.info("Teacher deregistered: %s", profile.external_id)
        return profile

    def _register(self, store: ProfileStore, profile: RoleProfile, password: str) -> Registration:
        with ThreadPoolExecutor(max_workers=2) as pool:
            identity_hit = pool.submit(self._identities.find_by_email, profile.email)
            profile_hit = pool.submit(store.exists, external_id=profile.external_id, email=profile.email)
            if identity_hit.result() or profile_hit.result():
                raise AlreadyRegisteredError(f"{store.role.value.title()} ID or email already registered")

            password_hash = generate_password_hash(password)
            profile = replace(profile, password_hash=password_hash)
            identity_draft = Identity(
                email=profile.email,
                display_name=profile.display_name,
                password_hash=password_hash,
                role=store.role,
            )

            identity_future = pool.submit(self._identities.create, identity_draft)
            profile_future = pool.submit(store.create, profile)
            identity, identity_error = _outcome(identity_future)
            created_profile, profile_error = _outcome(profile_future)

        if identity_error and profile_error:
            if isinstance(identity_error, AlreadyRegisteredError) and isinstance(profile_error, AlreadyRegisteredError):
                raise AlreadyRegisteredError(
                    f"{store.role.value.title()} ID or email already registered"
                ) from identity_error
            raise identity_error

        if identity_error or profile_error:
            side = "account" if identity else "profile"
            logger.error(
                "Partial registration of %s %s: only the %s was created",
                store.role.value,
                profile.external_id,
                side,
            )
            raise PartialRegistrationFailure(
                f"Registration of {profile.external_id} is incomplete: only the {side} was created",
                identity_created=identity is not None,
                profile_created=created_profile is not None,
            ) from (identity_error or profile_error)

        logger.info("%s registered: %s", store.role.value.title(), profile.external_id)
        return Registration(identity=identity, profile=created_profile)
