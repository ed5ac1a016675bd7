from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.decorators import current_credential, role_required
from ..common.http import json_body
from ..common.serializers import profile_to_json, recent_enrollment_to_json
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import NotFoundError
from .store import ProfileStore


def register(app: Flask, container: Container) -> None:
    gate = container.access_gate
    registration = container.registration

    def own_profile(store: ProfileStore, external_id: str):
        profile = store.find_by_external_id(external_id)
        if not profile:
            raise NotFoundError(f"{store.role.value.title()} not found")
        gate.ensure_self(current_credential(), profile.email)
        return jsonify(profile_to_json(profile)), 200

    @app.route("/api/students", methods=["POST"], endpoint="api_register_student")
    @role_required(gate, Role.ADMIN)
    def register_student():
        result = registration.register_student(json_body())
        return jsonify({"message": "Student registered successfully", "student": profile_to_json(result.profile)}), 201

    @app.route("/api/students", methods=["GET"], endpoint="api_list_students")
    @role_required(gate, Role.ADMIN)
    def list_students():
        students = container.student_store.find_all(department=request.args.get("department"))
        return jsonify([profile_to_json(s) for s in students]), 200

    @app.route("/api/students/<external_id>", methods=["GET"], endpoint="api_get_student")
    @role_required(gate, Role.STUDENT)
    def get_student(external_id: str):
        return own_profile(container.student_store, external_id)

    @app.route("/api/teachers", methods=["POST"], endpoint="api_register_teacher")
    @role_required(gate, Role.ADMIN)
    def register_teacher():
        result = registration.register_teacher(json_body())
        return jsonify({"message": "Teacher registered successfully", "teacher": profile_to_json(result.profile)}), 201

    @app.route("/api/teachers", methods=["GET"], endpoint="api_list_teachers")
    @role_required(gate, Role.ADMIN)
    def list_teachers():
        teachers = container.teacher_store.find_all(department=request.args.get("department"))
        return jsonify([profile_to_json(t) for t in teachers]), 200

    @app.route("/api/teachers/<external_id>", methods=["GET"], endpoint="api_get_teacher")
    @role_required(gate, Role.TEACHER)
    def get_teacher(external_id: str):
        return own_profile(container.teacher_store, external_id)

    @app.route("/api/teachers/<external_id>", methods=["DELETE"], endpoint="api_delete_teacher")
    @role_required(gate, Role.ADMIN)
    def delete_teacher(external_id: str):
        registration.deregister_teacher(external_id)
        return jsonify({"message": "Teacher deleted successfully"}), 200

    @app.route("/api/recent-activities", methods=["GET"], endpoint="api_recent_activities")
    @role_required(gate, Role.ADMIN)
    def recent_activities():
        items = container.student_store.recent_enrollments()
        return jsonify([recent_enrollment_to_json(i) for i in items]), 200
