from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import error_response, json_body, server_error
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .guards import current_user


def register(app: Flask, container: Container) -> None:
    guards = container.guards

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        try:
            result = container.auth_service.login(
                data.get("username") or data.get("registerNumber") or data.get("email") or "",
                data.get("password") or "",
            )
            return jsonify({"success": True, "token": result.token, "user": result.user.to_public_dict()})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("during login")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @guards.token_required
    def me():
        return jsonify({"success": True, "user": current_user().to_public_dict()})

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @guards.token_required
    def change_password():
        data = json_body()
        try:
            container.auth_service.change_password(
                user_id=current_user().user_id,
                current_password=data.get("currentPassword") or "",
                new_password=data.get("newPassword") or "",
            )
            return jsonify({"success": True, "message": "Password updated"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("changing password")

    @app.route("/api/admin/students/preload", methods=["POST"], endpoint="admin_preload_students")
    @guards.admin_required
    def preload_students():
        data = json_body()
        rows = data.get("students")
        try:
            if not isinstance(rows, list) or not rows:
                raise ValidationError("students must be a non-empty list", field="students")
            result = container.user_service.preload_students(rows)
            return (
                jsonify(
                    {
                        "success": True,
                        "message": f"{len(result.created)} students created",
                        "created": result.created,
                        "errors": result.errors,
                    }
                ),
                201,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("during student preload")
