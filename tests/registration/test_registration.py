from __future__ import annotations

import logging

import pytest

from conftest import student_payload, teacher_payload
from university_admin.core.enums import Role
from university_admin.core.exceptions import (
    AlreadyRegisteredError,
    DuplicateExternalIdError,
    DuplicateIdentityError,
    NotFoundError,
    PartialRegistrationFailure,
    ValidationError,
)


def test_register_student_creates_identity_and_profile_pair(container, repos):
    result = container.registration.register_student(student_payload(email=" Hana.Tesfaye@University.com"))

    assert result.identity.email == result.profile.email == "hana.tesfaye@university.com"
    assert result.identity.role == Role.STUDENT
    assert result.identity.display_name == result.profile.display_name == "Hana Tesfaye"
    assert result.identity.password_hash == result.profile.password_hash
    assert container.identity_store.verify_password(result.identity, "student-pass-2")
    assert [e.course_code for e in result.profile.enrollments] == ["CS101"]
    assert list(repos.identities.rows) == ["hana.tesfaye@university.com"]
    assert [p.external_id for p in repos.students.rows] == ["CS_STU_002"]


def test_register_teacher_creates_identity_and_profile_pair(container):
    result = container.registration.register_teacher(teacher_payload(coursesAssigned=["CS101", "CS101", "MA110"]))

    assert result.identity.role == Role.TEACHER
    assert result.profile.details.assigned_courses == frozenset({"CS101", "MA110"})
    assert container.teacher_store.find_by_email("abebe.kebede@university.com") == result.profile


def test_duplicate_external_id_is_already_registered(container, repos):
    container.registration.register_student(student_payload())

    with pytest.raises(AlreadyRegisteredError):
        container.registration.register_student(student_payload(email="someone.else@university.com"))
    assert len(repos.identities.rows) == 1
    assert len(repos.students.rows) == 1


def test_duplicate_email_is_already_registered_across_roles(container, repos):
    container.registration.register_teacher(teacher_payload(email="shared@university.com"))

    with pytest.raises(AlreadyRegisteredError):
        container.registration.register_student(student_payload(email="shared@university.com"))
    assert repos.students.rows == []


def test_validation_lists_every_violated_field(container, repos):
    bad = student_payload(
        externalId="STU-2",
        displayName="H",
        email="not-an-email",
        phone="12",
        gradeLevel="9",
        gender="Unknown",
        semester="Summer",
        registrationDate="yesterday",
        enrolledCourses=[],
        password="short",
    )

    with pytest.raises(ValidationError) as exc:
        container.registration.register_student(bad)

    assert set(exc.value.fields) == {
        "externalId",
        "displayName",
        "email",
        "phone",
        "gradeLevel",
        "gender",
        "semester",
        "registrationDate",
        "enrolledCourses",
        "password",
    }
    assert repos.identities.rows == {}


@pytest.mark.parametrize("salary", [0, -100, "NaN", "Infinity", "-inf", True])
def test_teacher_validation_rejects_non_positive_salary_and_missing_fields(container, salary):
    data = teacher_payload(salary=salary, position="Dean")
    del data["hireDate"]
    del data["status"]

    with pytest.raises(ValidationError) as exc:
        container.registration.register_teacher(data)

    assert {"salary", "position", "hireDate", "status"} <= set(exc.value.fields)


def test_one_sided_failure_is_reported_as_partial_registration(container, repos, caplog):
    repos.teachers.fail_create = RuntimeError("connection lost")

    with caplog.at_level(logging.ERROR), pytest.raises(PartialRegistrationFailure) as exc:
        container.registration.register_teacher(teacher_payload())

    assert exc.value.identity_created is True
    assert exc.value.profile_created is False
    assert exc.value.details() == {"identityCreated": True, "profileCreated": False}
    # Nothing is rolled back.
    assert "abebe.kebede@university.com" in repos.identities.rows
    assert repos.teachers.rows == []
    assert "Partial registration" in caplog.text


def test_profile_only_partial_registration(container, repos):
    repos.identities.fail_create = RuntimeError("connection lost")

    with pytest.raises(PartialRegistrationFailure) as exc:
        container.registration.register_student(student_payload())

    assert exc.value.identity_created is False
    assert exc.value.profile_created is True


def test_lost_race_on_both_sides_is_already_registered(container, repos):
    repos.identities.fail_create = DuplicateIdentityError("taken")
    repos.students.fail_create = DuplicateExternalIdError("taken")

    with pytest.raises(AlreadyRegisteredError):
        container.registration.register_student(student_payload())


def test_deregister_teacher_removes_profile_and_account(container, repos):
    container.registration.register_teacher(teacher_payload())

    removed = container.registration.deregister_teacher("T002")

    assert removed.external_id == "T002"
    assert repos.teachers.rows == []
    assert repos.identities.rows == {}


def test_deregister_unknown_teacher_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.registration.deregister_teacher("T999")


def test_deregister_teacher_without_account_logs_and_succeeds(container, repos, caplog):
    container.registration.register_teacher(teacher_payload())
    repos.identities.rows.clear()

    with caplog.at_level(logging.WARNING):
        container.registration.deregister_teacher("T002")

    assert repos.teachers.rows == []
    assert "had no account" in caplog.text


@pytest.mark.parametrize("hire_date", ["2024-05-01garbage", "2024-05-01 and more", "01/05/2024"])
def test_teacher_hire_date_must_be_a_whole_iso_date(container, repos, hire_date):
    with pytest.raises(ValidationError) as exc:
        container.registration.register_teacher(teacher_payload(hireDate=hire_date))

    assert set(exc.value.fields) == {"hireDate"}
    assert repos.teachers.rows == []


def test_hire_date_accepts_a_full_iso_timestamp(container):
    registration = container.registration.register_teacher(teacher_payload(hireDate="2022-09-01T08:00:00Z"))

    assert registration.profile.details.hire_date.isoformat() == "2022-09-01"


def test_deregister_teacher_logs_courses_left_assigned(seeded, repos, caplog):
    with caplog.at_level(logging.WARNING):
        seeded.registration.deregister_teacher("T001")

    assert seeded.teacher_store.find_by_external_id("T001") is None
    assert "courses still assigned" in caplog.text
    assert "CS101" in caplog.text and "CS202" in caplog.text
    # Courses keep their assignment; reassigning them is an admin task.
    assert {c.teacher_external_id for c in repos.courses.rows.values()} == {"T001"}


def test_deregister_teacher_without_courses_logs_no_course_warning(container, caplog):
    container.registration.register_teacher(teacher_payload())

    with caplog.at_level(logging.WARNING):
        container.registration.deregister_teacher("T002")

    assert "courses still assigned" not in caplog.text
