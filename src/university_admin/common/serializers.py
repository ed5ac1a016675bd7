"""JSON shapes returned by the HTTP layer. Password hashes never leave here."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional

from ..attendance.model import AttendanceRecord, Roster
from ..courses.model import Course
from ..identities.model import Identity
from ..profiles.model import RecentEnrollment, RoleProfile, StudentDetails, TeacherDetails


def _iso(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    return value.isoformat()


def identity_to_json(identity: Identity) -> Dict[str, Any]:
    prefs = identity.preferences
    return {
        "email": identity.email,
        "name": identity.display_name,
        "role": identity.role.value,
        "profileImage": identity.profile_image_ref,
        "settings": {
            "language": prefs.language.value,
            "theme": prefs.theme.value,
            "notifications": prefs.notifications,
            "timeZone": prefs.time_zone.value,
        },
    }


def profile_to_json(profile: RoleProfile) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "role": profile.role.value,
        "externalId": profile.external_id,
        "name": profile.display_name,
        "email": profile.email,
        "department": profile.department,
        "phone": profile.phone,
        "status": profile.status.value,
    }
    details = profile.details
    if isinstance(details, StudentDetails):
        data.update(
            region=details.region,
            gradeLevel=details.grade_level,
            gender=details.gender.value,
            batch=details.batch,
            semester=details.semester.value,
            registrationDate=_iso(details.registration_date),
            enrolledCourses=[
                {"courseCode": e.course_code, "enrolledAt": _iso(e.enrolled_at), "status": e.status.value}
                for e in details.enrollments
            ],
        )
    elif isinstance(details, TeacherDetails):
        data.update(
            salary=details.salary,
            hireDate=_iso(details.hire_date),
            position=details.position.value,
            coursesAssigned=sorted(details.assigned_courses),
        )
    return data


def course_to_json(course: Course) -> Dict[str, Any]:
    return {
        "courseCode": course.course_code,
        "courseName": course.course_name,
        "description": course.description,
        "teacherExternalId": course.teacher_external_id,
        "department": course.department,
        "enrolledStudentIds": list(course.enrolled_student_ids),
    }


def attendance_to_json(record: AttendanceRecord) -> Dict[str, Any]:
    return {
        "courseCode": record.course_code,
        "studentExternalId": record.student_external_id,
        "date": _iso(record.attendance_date),
        "status": record.status.value,
        "teacherExternalId": record.teacher_external_id,
        "department": record.department,
    }


def roster_to_json(roster: Roster) -> Dict[str, Any]:
    return {
        "courses": [course_to_json(c) for c in roster.courses],
        "students": [profile_to_json(s) for s in roster.students],
    }


def recent_enrollment_to_json(item: RecentEnrollment) -> Dict[str, Any]:
    return {
        "studentName": item.student_name,
        "courseCode": item.course_code,
        "status": item.status.value,
        "enrolledAt": _iso(item.enrolled_at),
    }
