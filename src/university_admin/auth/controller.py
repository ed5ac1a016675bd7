from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..common.serializers import identity_to_json
from ..container import Container
from ..core.exceptions import ValidationError
from ..identities.model import IdentityPatch
from ..identities.store import merge_preferences
from .decorators import current_credential, role_required


def register(app: Flask, container: Container) -> None:
    gate = container.access_gate
    identities = container.identity_store

    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def login():
        data = json_body()
        result = container.auth_service.login(str(data.get("email") or ""), str(data.get("password") or ""))
        return jsonify({"token": result.token, "user": identity_to_json(result.identity)}), 200

    @app.route("/api/account", methods=["GET"], endpoint="api_account")
    @role_required(gate)
    def account():
        identity = identities.get(current_credential().subject_email)
        return jsonify(identity_to_json(identity)), 200

    @app.route("/api/account", methods=["PATCH"], endpoint="api_account_update")
    @role_required(gate)
    def update_account():
        data = json_body()
        email = current_credential().subject_email

        preferences = None
        if "settings" in data:
            preferences = merge_preferences(identities.get(email).preferences, data["settings"])

        patch = IdentityPatch(
            display_name=str(data["name"]) if data.get("name") is not None else None,
            email=str(data["email"]) if data.get("email") is not None else None,
            preferences=preferences,
        )
        updated = identities.update_profile(email, patch)
        return jsonify({"message": "Profile updated successfully", "user": identity_to_json(updated)}), 200

    @app.route("/api/account/password", methods=["POST"], endpoint="api_account_password")
    @role_required(gate)
    def change_password():
        data = json_body()
        current = data.get("currentPassword")
        new = data.get("newPassword")
        if not current or not new:
            raise ValidationError(
                "Current password and new password are required",
                fields={k: "required" for k in ("currentPassword", "newPassword") if not data.get(k)},
            )
        identities.change_password(current_credential().subject_email, str(current), str(new))
        return jsonify({"message": "Password changed successfully"}), 200
