from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..container import Container
from ..users.guards import current_user

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/cache/clear", methods=["POST"], endpoint="admin_clear_cache")
    @container.guards.admin_required
    def clear_cache():
        cleared = container.cache.clear()
        logger.info("Response cache cleared by %s", current_user().identity)
        return jsonify({"success": True, "cleared": cleared})
