from __future__ import annotations

from flask import Flask, request

from ..cache.decorators import cached_view
from ..cache.response_cache import CacheTag
from ..common.http import error_response, server_error
from ..core.exceptions import DomainError
from ..container import Container
from .service import ProgressQuery


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/progress", methods=["GET"], endpoint="admin_progress")
    @container.guards.admin_required
    @cached_view(container.cache, CacheTag.ADMIN_PROGRESS, per_user=False)
    def progress():
        try:
            query = ProgressQuery.parse(request.args.to_dict())
            return container.progress_service.progress(query)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("fetching progress")
