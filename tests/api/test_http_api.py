from __future__ import annotations

import pytest

from conftest import student_payload, teacher_payload
from university_admin.core.exceptions import ConfigurationError
from university_admin.main import create_app


@pytest.fixture()
def app(seeded, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(seeded)


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client, email: str, password: str) -> dict:
    res = client.post("/api/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.get_json()
    return {"Authorization": f"Bearer {res.get_json()['token']}"}


@pytest.fixture()
def admin(client):
    return _login(client, "aman@university.com", "admin123456")


@pytest.fixture()
def teacher(client):
    return _login(client, "john.doe@university.com", "teacher123456")


@pytest.fixture()
def student(client):
    return _login(client, "jane.smith@university.com", "student123456")


def test_login_returns_token_and_user_without_password(client):
    res = client.post("/api/login", json={"email": "jane.smith@university.com", "password": "student123456"})

    body = res.get_json()
    assert res.status_code == 200
    assert body["token"].count(".") == 2
    assert body["user"]["role"] == "student"
    assert body["user"]["settings"]["timeZone"] == "Africa/Addis_Ababa"
    assert "password" not in str(body["user"]).lower()


def test_login_failures(client):
    res = client.post("/api/login", json={"email": "jane.smith@university.com", "password": "wrong-one"})
    assert res.status_code == 401
    assert res.get_json() == {"kind": "Unauthenticated", "message": "Invalid email or password"}

    res = client.post("/api/login", json={"email": ""})
    assert res.status_code == 400
    assert res.get_json()["kind"] == "ValidationError"

    res = client.post("/api/login", data="not json", content_type="text/plain")
    assert res.status_code == 400


def test_protected_routes_need_a_valid_token(client):
    assert client.get("/api/students").status_code == 401
    res = client.get("/api/students", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 401
    assert res.get_json()["kind"] == "Unauthenticated"


def test_admin_registers_and_lists_students(client, admin):
    res = client.post("/api/students", json=student_payload(), headers=admin)

    assert res.status_code == 201
    created = res.get_json()["student"]
    assert created["externalId"] == "CS_STU_002"
    assert created["enrolledCourses"][0]["courseCode"] == "CS101"
    assert "passwordHash" not in created

    listed = client.get("/api/students?department=Computer Science", headers=admin).get_json()
    assert [s["externalId"] for s in listed] == ["CS_STU_001", "CS_STU_002"]
    assert client.get("/api/students?department=History", headers=admin).get_json() == []


def test_registration_errors_map_to_status_codes(client, admin):
    res = client.post("/api/students", json=student_payload(externalId="CS_STU_001"), headers=admin)
    assert res.status_code == 409
    assert res.get_json()["kind"] == "AlreadyRegistered"

    res = client.post("/api/teachers", json=teacher_payload(externalId="2"), headers=admin)
    assert res.status_code == 400
    assert "externalId" in res.get_json()["fields"]

    res = client.post("/api/teachers", json=teacher_payload(salary="NaN"), headers=admin)
    assert res.status_code == 400
    assert set(res.get_json()["fields"]) == {"salary"}


def test_only_admin_can_register(client, teacher):
    res = client.post("/api/teachers", json=teacher_payload(), headers=teacher)

    assert res.status_code == 403
    assert res.get_json()["kind"] == "Forbidden"


def test_own_profile_is_self_scoped(client, admin, student):
    res = client.get("/api/students/CS_STU_001", headers=student)
    assert res.status_code == 200
    assert res.get_json()["name"] == "Jane Smith"

    client.post("/api/students", json=student_payload(), headers=admin)
    assert client.get("/api/students/CS_STU_002", headers=student).status_code == 403
    assert client.get("/api/students/CS_STU_404", headers=student).status_code == 404
    assert client.get("/api/teachers/T001", headers=student).status_code == 403


def test_teacher_profile_and_deregistration(client, admin, teacher):
    res = client.get("/api/teachers/T001", headers=teacher)
    assert res.status_code == 200
    assert res.get_json()["coursesAssigned"] == ["CS101", "CS202"]

    client.post("/api/teachers", json=teacher_payload(), headers=admin)
    assert client.delete("/api/teachers/T002", headers=admin).status_code == 200
    assert client.delete("/api/teachers/T002", headers=admin).status_code == 404
    res = client.post("/api/login", json={"email": "abebe.kebede@university.com", "password": "teacher-pass-2"})
    assert res.status_code == 401


def test_attendance_flow(client, teacher, student):
    roster = client.get("/api/teacher/roster", headers=teacher).get_json()
    assert [c["courseCode"] for c in roster["courses"]] == ["CS101", "CS202"]
    assert [s["externalId"] for s in roster["students"]] == ["CS_STU_001"]

    payload = {
        "courseCode": "CS101",
        "date": "2024-03-01",
        "records": [{"studentExternalId": "CS_STU_001", "status": "Present"}],
    }
    res = client.post("/api/attendance", json=payload, headers=teacher)
    assert res.status_code == 201
    assert res.get_json()["saved"] == 1

    payload["records"][0]["status"] = "Absent"
    client.post("/api/attendance", json=payload, headers=teacher)

    rows = client.get("/api/attendance?courseCode=CS101&date=2024-03-01", headers=teacher).get_json()
    assert rows == [
        {
            "courseCode": "CS101",
            "studentExternalId": "CS_STU_001",
            "date": "2024-03-01",
            "status": "Absent",
            "teacherExternalId": "T001",
            "department": "Computer Science",
        }
    ]

    assert client.post("/api/attendance", json=payload, headers=student).status_code == 403


def test_attendance_errors(client, teacher):
    res = client.post(
        "/api/attendance",
        json={"courseCode": "CS101", "date": "2024-03-01", "records": [{"studentExternalId": "X", "status": "Present"}]},
        headers=teacher,
    )
    assert res.status_code == 400
    assert res.get_json() == {
        "kind": "StudentNotEnrolled",
        "message": "Student X is not enrolled in CS101",
        "studentExternalId": "X",
        "courseCode": "CS101",
    }

    res = client.post("/api/attendance", json={"courseCode": "CS101", "date": "2024-03-01", "records": []}, headers=teacher)
    assert res.get_json()["kind"] == "InvalidInput"

    res = client.get("/api/attendance?courseCode=CS999", headers=teacher)
    assert res.status_code == 404


def test_courses_and_recent_activities(client, admin):
    res = client.post(
        "/api/courses",
        json={
            "courseCode": "CS303",
            "courseName": "Operating Systems",
            "description": "Processes, memory management and file systems.",
            "teacherExternalId": "T001",
            "department": "Computer Science",
        },
        headers=admin,
    )
    assert res.status_code == 201

    codes = [c["courseCode"] for c in client.get("/api/courses", headers=admin).get_json()]
    assert codes == ["CS101", "CS202", "CS303"]

    activities = client.get("/api/recent-activities", headers=admin).get_json()
    assert {a["courseCode"] for a in activities} == {"CS101", "CS202"}
    assert activities[0]["studentName"] == "Jane Smith"


def test_account_settings_and_password(client, student):
    account = client.get("/api/account", headers=student).get_json()
    assert account["email"] == "jane.smith@university.com"

    res = client.patch("/api/account", json={"name": "Jane S.", "settings": {"theme": "dark"}}, headers=student)
    assert res.status_code == 200
    assert res.get_json()["user"]["name"] == "Jane S."
    assert res.get_json()["user"]["settings"]["theme"] == "dark"
    assert res.get_json()["user"]["settings"]["language"] == "English"

    res = client.patch("/api/account", json={"settings": {"language": "Klingon"}}, headers=student)
    assert res.status_code == 400

    res = client.patch("/api/account", json={"email": "jane@elsewhere.com"}, headers=student)
    assert res.status_code == 400

    res = client.post(
        "/api/account/password",
        json={"currentPassword": "nope-nope", "newPassword": "brand-new-pass"},
        headers=student,
    )
    assert res.status_code == 400
    assert res.get_json()["kind"] == "InvalidCredentials"

    res = client.post(
        "/api/account/password",
        json={"currentPassword": "student123456", "newPassword": "brand-new-pass"},
        headers=student,
    )
    assert res.status_code == 200
    _login(client, "jane.smith@university.com", "brand-new-pass")


def test_unexpected_errors_become_internal_error(client, admin, seeded, monkeypatch):
    def boom(**_kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(seeded.course_service, "list_courses", boom)

    res = client.get("/api/courses", headers=admin)

    assert res.status_code == 500
    assert res.get_json() == {"kind": "InternalError", "message": "Internal server error"}


def test_unknown_route_is_json(client):
    res = client.get("/api/nothing-here")

    assert res.status_code == 404
    assert res.get_json()["kind"] == "NotFound"


def test_missing_jwt_secret_aborts_startup(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "")

    with pytest.raises(ConfigurationError):
        create_app()
