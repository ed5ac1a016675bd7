from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import FieldErrors
from ..core.constants import MIN_COURSE_CODE_LENGTH, MIN_COURSE_DESCRIPTION_LENGTH, MIN_NAME_LENGTH
from ..core.exceptions import AlreadyRegisteredError, NotFoundError
from ..profiles.store import TeacherStore
from .model import Course
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    """Use case: course catalogue managed by admins."""

    def __init__(self, courses: CourseRepository, teachers: TeacherStore):
        self._courses = courses
        self._teachers = teachers

    def create_course(self, data: Mapping[str, Any]) -> Course:
        errors = FieldErrors()
        course_code = errors.text(data, "courseCode", min_len=MIN_COURSE_CODE_LENGTH)
        course_name = errors.text(data, "courseName", min_len=MIN_NAME_LENGTH)
        description = errors.text(data, "description", min_len=MIN_COURSE_DESCRIPTION_LENGTH)
        teacher_id = errors.text(data, "teacherExternalId")
        department = errors.text(data, "department")

        enrolled = data.get("enrolledStudentIds") or []
        if not isinstance(enrolled, list) or not all(isinstance(s, str) and s.strip() for s in enrolled):
            errors.add("enrolledStudentIds", "must be a list of student IDs")
            enrolled = []
        errors.raise_if_any("Invalid course")

        if self._courses.get_by_code(course_code):
            raise AlreadyRegisteredError("Course already registered with this code")
        if not self._teachers.find_by_external_id(teacher_id):
            raise NotFoundError(f"Teacher {teacher_id} not found")

        course = self._courses.create(
            Course(
                course_code=course_code,
                course_name=course_name,
                description=description,
                teacher_external_id=teacher_id,
                department=department,
                enrolled_student_ids=tuple(dict.fromkeys(s.strip() for s in enrolled)),
            )
        )
        logger.info("Course registered: %s (teacher %s)", course.course_code, course.teacher_external_id)
        return course

    def get_course(self, course_code: str) -> Optional[Course]:
        return self._courses.get_by_code((course_code or "").strip())

    def list_courses(self, *, department: Optional[str] = None) -> Sequence[Course]:
        department = (department or "").strip() or None
        return list(self._courses.list_all(department=department))

    def list_for_teacher(self, teacher_external_id: str) -> Sequence[Course]:
        return list(self._courses.list_for_teacher(teacher_external_id))
