from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import error_response, form_or_json, server_error
from ..core.exceptions import DomainError
from ..container import Container
from ..storage.object_storage import FilePayload
from ..users.guards import current_user


def register(app: Flask, container: Container) -> None:
    @app.route("/api/student/assignment", methods=["POST"], endpoint="student_submit_assignment")
    @container.guards.student_required
    def submit_assignment():
        data = form_or_json()
        files = [FilePayload.from_upload(f) for f in request.files.getlist("assignment")]
        try:
            submission = container.submission_service.submit(
                user=current_user(),
                session_id=data.get("sessionId"),
                assignment_title=data.get("assignmentTitle"),
                assignment_type=data.get("assignmentType"),
                response=data.get("response"),
                files=[f for f in files if f is not None],
            )
            return (
                jsonify({"success": True, "message": "Assignment submitted successfully", "submission": submission.to_dict()}),
                201,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("submitting assignment")
