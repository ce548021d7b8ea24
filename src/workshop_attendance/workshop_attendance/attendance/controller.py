from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import error_response, form_or_json, json_body, server_error
from ..core.exceptions import DomainError
from ..container import Container
from ..storage.object_storage import FilePayload
from ..users.guards import current_user


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.attendance_service

    @app.route("/api/student/attendance", methods=["POST"], endpoint="student_mark_attendance")
    @guards.student_required
    def mark_attendance():
        data = form_or_json()
        try:
            record = service.mark(
                user=current_user(),
                session_id=data.get("sessionId"),
                photo=FilePayload.from_upload(request.files.get("photo")),
            )
            return jsonify({"success": True, "message": "Attendance marked successfully", "attendance": record.to_dict()}), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("marking attendance")

    @app.route("/api/admin/attendance/override", methods=["POST"], endpoint="admin_override_attendance")
    @guards.admin_required
    def override_attendance():
        data = json_body()
        try:
            record = service.override(
                admin=current_user(),
                register_number=data.get("registerNumber"),
                session_id=data.get("sessionId"),
                comment=data.get("comment"),
            )
            return (
                jsonify({"success": True, "message": "Attendance override successful", "attendance": record.to_dict()}),
                201,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("during attendance override")

    @app.route("/api/student/profile", methods=["GET"], endpoint="student_profile")
    @guards.student_required
    def profile():
        try:
            return jsonify(service.profile(current_user()).to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching profile")
