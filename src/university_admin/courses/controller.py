from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.decorators import role_required
from ..common.http import json_body
from ..common.serializers import course_to_json
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    gate = container.access_gate
    courses = container.course_service

    @app.route("/api/courses", methods=["POST"], endpoint="api_create_course")
    @role_required(gate, Role.ADMIN)
    def create_course():
        course = courses.create_course(json_body())
        return jsonify({"message": "Course registered successfully", "course": course_to_json(course)}), 201

    @app.route("/api/courses", methods=["GET"], endpoint="api_list_courses")
    @role_required(gate, Role.ADMIN)
    def list_courses():
        items = courses.list_courses(department=request.args.get("department"))
        return jsonify([course_to_json(c) for c in items]), 200
