from __future__ import annotations

from flask import Flask, jsonify

from ..cache.decorators import cached_view
from ..cache.response_cache import CacheTag
from ..common.http import error_response, json_body, server_error
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.day_service

    @app.route("/api/admin/days", methods=["POST"], endpoint="admin_create_day")
    @guards.admin_required
    def create_day():
        data = json_body()
        try:
            day = service.create_day(day_number=data.get("dayNumber"), title=data.get("title"), day_date=data.get("date"))
            return jsonify({"success": True, "day": day.to_dict()}), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("creating day")

    @app.route("/api/admin/days", methods=["GET"], endpoint="admin_list_days")
    @guards.admin_required
    @cached_view(container.cache, CacheTag.ADMIN_DAYS, per_user=False)
    def list_days_admin():
        try:
            return [d.to_dict() for d in service.list_days()]
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching days")

    @app.route("/api/admin/days/<int:day_id>/status", methods=["PUT"], endpoint="admin_update_day_status")
    @guards.admin_required
    def update_day_status(day_id: int):
        data = json_body()
        try:
            day = service.update_status(day_id=day_id, status=data.get("status"))
            return jsonify({"success": True, "day": day.to_dict()})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("updating day status")

    @app.route("/api/student/days", methods=["GET"], endpoint="student_list_days")
    @guards.student_required
    @cached_view(container.cache, CacheTag.STUDENT_DAYS, per_user=False)
    def list_days_student():
        # Locked days are listed too so the client can show them greyed out.
        try:
            return [d.to_dict() for d in service.list_days()]
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching days")
