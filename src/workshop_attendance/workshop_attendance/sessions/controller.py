from __future__ import annotations

import hmac
import logging

from flask import Flask, jsonify, request

from ..cache.decorators import cached_view
from ..cache.response_cache import CacheTag
from ..common.http import bearer_token, error_response, json_body, server_error
from ..core.exceptions import DomainError
from ..container import Container
from ..users.guards import current_user

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.session_service
    cache = container.cache

    # ---- admin ----

    @app.route("/api/admin/sessions", methods=["POST"], endpoint="admin_create_session")
    @guards.admin_required
    def create_session():
        try:
            session = service.create_session(json_body())
            return jsonify({"success": True, "session": session.to_dict()}), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("creating session")

    @app.route("/api/admin/sessions", methods=["GET"], endpoint="admin_list_sessions")
    @guards.admin_required
    @cached_view(cache, CacheTag.ADMIN_SESSIONS, per_user=False)
    def list_sessions():
        try:
            return service.list_with_days()
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching sessions")

    @app.route("/api/admin/sessions/<int:session_id>", methods=["PUT"], endpoint="admin_update_session")
    @guards.admin_required
    def update_session(session_id: int):
        try:
            session = service.update_session(session_id, json_body())
            return jsonify({"success": True, "session": session.to_dict()})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("updating session")

    @app.route(
        "/api/admin/sessions/<int:session_id>/attendance/start", methods=["POST"], endpoint="admin_start_attendance"
    )
    @guards.admin_required
    def start_attendance(session_id: int):
        try:
            change = service.start_attendance(session_id)
            return jsonify({"success": True, "message": "Attendance started", **change.to_dict()})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("starting attendance")

    @app.route(
        "/api/admin/sessions/<int:session_id>/attendance/stop", methods=["POST"], endpoint="admin_stop_attendance"
    )
    @guards.admin_required
    def stop_attendance(session_id: int):
        try:
            change = service.stop_attendance(session_id)
            return jsonify({"success": True, "message": "Attendance stopped", **change.to_dict()})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("stopping attendance")

    # ---- student ----

    @app.route("/api/student/sessions/<int:day_id>", methods=["GET"], endpoint="student_sessions_for_day")
    @guards.student_required
    @cached_view(cache, CacheTag.STUDENT_SESSIONS)
    def sessions_for_day(day_id: int):
        try:
            return service.sessions_for_day(current_user(), day_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching sessions")

    @app.route("/api/student/session/<int:session_id>", methods=["GET"], endpoint="student_session_detail")
    @guards.student_required
    @cached_view(cache, CacheTag.STUDENT_SESSIONS)
    def session_detail(session_id: int):
        try:
            return service.session_detail(current_user(), session_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching session")

    # ---- polling + scheduled trigger ----

    @app.route("/api/sync/check", methods=["GET"], endpoint="sync_check")
    @guards.token_required
    @cached_view(cache, CacheTag.SYNC, per_user=False)
    def sync_check():
        try:
            return service.sync_state()
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("checking for updates")

    @app.route("/api/cron/close-expired", methods=["POST"], endpoint="cron_close_expired")
    def cron_close_expired():
        expected = app.config.get("CRON_SECRET") or ""
        supplied = request.headers.get("X-Cron-Secret") or bearer_token(request.headers.get("Authorization")) or ""
        if not expected or not hmac.compare_digest(expected, supplied):
            logger.warning("Rejected close-expired trigger from %s", request.remote_addr)
            return jsonify({"success": False, "message": "Not authorized"}), 401
        try:
            closed = container.closer.close_expired()
            return jsonify({"success": True, "closed": closed})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("closing expired sessions")
