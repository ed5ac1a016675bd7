from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional, Sequence, Union

from ..auth.credentials import Credential
from ..common.datetime_utils import parse_iso_date
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, InvalidInputError, NotFoundError, StudentNotEnrolledError
from ..courses.model import Course
from ..courses.repository import CourseRepository
from ..profiles.model import RoleProfile
from ..profiles.store import StudentStore, TeacherStore
from .model import AttendanceMark, AttendanceRecord, Roster
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_STATUSES = ", ".join(s.value for s in AttendanceStatus)


def _parse_day(value: Union[str, date, None]) -> date:
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        raise InvalidInputError("Date is required", fields={"date": "required"})
    try:
        # Full ISO timestamps are accepted; only the calendar day is kept.
        return parse_iso_date(text)
    except ValueError as e:
        raise InvalidInputError("Invalid date format", fields={"date": "must be a date (YYYY-MM-DD)"}) from e


def _parse_marks(records: Any) -> List[AttendanceMark]:
    if not isinstance(records, list) or not records:
        raise InvalidInputError("Records must be a non-empty list", fields={"records": "non-empty list required"})

    marks: List[AttendanceMark] = []
    for i, entry in enumerate(records):
        if not isinstance(entry, dict):
            raise InvalidInputError(f"Record {i} must be an object", fields={f"records[{i}]": "object required"})
        student_id = str(entry.get("studentExternalId") or "").strip()
        raw_status = entry.get("status")
        if not student_id or not raw_status:
            raise InvalidInputError(
                "Each record must include studentExternalId and status",
                fields={f"records[{i}]": "studentExternalId and status required"},
            )
        try:
            status = AttendanceStatus(raw_status)
        except ValueError as e:
            raise InvalidInputError(
                f"Invalid status for student {student_id}",
                fields={f"records[{i}].status": f"must be one of: {_STATUSES}"},
            ) from e
        marks.append(AttendanceMark(student_external_id=student_id, status=status))
    return marks


class AttendanceService:
    """Use case: teachers record and read back per-course daily attendance.

    Authorization (course ownership) and the enrollment checks run before the
    writes but not in the same transaction as them: a course reassigned while a
    batch is being saved can still receive that batch. Each row write is atomic.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        courses: CourseRepository,
        students: StudentStore,
        teachers: TeacherStore,
    ):
        self._attendance = attendance
        self._courses = courses
        self._students = students
        self._teachers = teachers

    def _caller_teacher(self, credential: Credential) -> RoleProfile:
        teacher = self._teachers.find_by_email(credential.subject_email)
        if not teacher:
            raise AuthorizationError("No teacher profile for this account")
        return teacher

    def _owned_course(self, teacher: RoleProfile, course_code: str) -> Course:
        course = self._courses.get_by_code(course_code)
        if not course:
            raise NotFoundError("Course not found")
        if course.teacher_external_id != teacher.external_id:
            raise AuthorizationError("You are not assigned to this course")
        return course

    def save_attendance(
        self,
        credential: Credential,
        course_code: str,
        attendance_date: Union[str, date, None],
        records: Any,
    ) -> int:
        course_code = str(course_code or "").strip()
        if not course_code:
            raise InvalidInputError("Course code is required", fields={"courseCode": "required"})
        day = _parse_day(attendance_date)
        marks = _parse_marks(records)

        teacher = self._caller_teacher(credential)
        course = self._owned_course(teacher, course_code)

        # All-or-nothing on enrollment: nothing is written unless every student qualifies.
        for mark in marks:
            student = self._students.find_by_external_id(mark.student_external_id)
            if not student or not student.is_enrolled_in(course.course_code):
                raise StudentNotEnrolledError(
                    f"Student {mark.student_external_id} is not enrolled in {course.course_code}",
                    student_external_id=mark.student_external_id,
                    course_code=course.course_code,
                )

        for mark in marks:
            self._attendance.upsert(
                AttendanceRecord(
                    course_code=course.course_code,
                    student_external_id=mark.student_external_id,
                    attendance_date=day,
                    status=mark.status,
                    teacher_external_id=teacher.external_id,
                    department=course.department,
                )
            )

        logger.info(
            "Attendance saved: %s on %s by %s (%d records)",
            course.course_code,
            day.isoformat(),
            teacher.external_id,
            len(marks),
        )
        return len(marks)

    def get_assigned_roster(self, credential: Credential) -> Roster:
        teacher = self._caller_teacher(credential)
        courses = tuple(self._courses.list_for_teacher(teacher.external_id))
        codes = [c.course_code for c in courses]
        if not codes:
            return Roster(courses=(), students=())

        students = tuple(s.with_enrollments_limited_to(codes) for s in self._students.find_enrolled_in(codes))
        return Roster(courses=courses, students=students)

    def list_attendance(
        self,
        credential: Credential,
        course_code: str,
        attendance_date: Union[str, date, None] = None,
    ) -> Sequence[AttendanceRecord]:
        course_code = str(course_code or "").strip()
        if not course_code:
            raise InvalidInputError("Course code is required", fields={"courseCode": "required"})
        day: Optional[date] = _parse_day(attendance_date) if attendance_date else None

        teacher = self._caller_teacher(credential)
        course = self._owned_course(teacher, course_code)
        return list(self._attendance.list_for_course(course.course_code, teacher.external_id, day))
