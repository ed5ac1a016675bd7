from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.decorators import current_credential, role_required
from ..common.http import json_body
from ..common.serializers import attendance_to_json, roster_to_json
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    gate = container.access_gate
    attendance = container.attendance_service

    @app.route("/api/teacher/roster", methods=["GET"], endpoint="api_teacher_roster")
    @role_required(gate, Role.TEACHER)
    def roster():
        return jsonify(roster_to_json(attendance.get_assigned_roster(current_credential()))), 200

    @app.route("/api/attendance", methods=["POST"], endpoint="api_save_attendance")
    @role_required(gate, Role.TEACHER)
    def save_attendance():
        data = json_body()
        saved = attendance.save_attendance(
            current_credential(),
            data.get("courseCode"),
            data.get("date"),
            data.get("records"),
        )
        return jsonify({"message": "Attendance saved successfully", "saved": saved}), 201

    @app.route("/api/attendance", methods=["GET"], endpoint="api_list_attendance")
    @role_required(gate, Role.TEACHER)
    def list_attendance():
        records = attendance.list_attendance(
            current_credential(),
            request.args.get("courseCode", ""),
            request.args.get("date") or None,
        )
        return jsonify([attendance_to_json(r) for r in records]), 200
