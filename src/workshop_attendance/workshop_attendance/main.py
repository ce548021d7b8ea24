from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, send_from_directory

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .cache.controller import register as register_cache
from .container import Container, build_container
from .core.constants import MAX_UPLOAD_BYTES
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables, seed_demo_data
from .days.controller import register as register_days
from .progress.controller import register as register_progress
from .sessions.controller import register as register_sessions
from .submissions.controller import register as register_submissions
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def _bootstrap_database(settings) -> None:
    db_config = getattr(settings, "DB_CONFIG")
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

    admin_password = getattr(settings, "ADMIN_PASSWORD", None)
    if admin_password:
        ensure_admin_user(
            db_config,
            register_number=getattr(settings, "ADMIN_REGISTER_NUMBER", "ADMIN001"),
            email=getattr(settings, "ADMIN_EMAIL", ""),
            password=admin_password,
        )

    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        seed_demo_data(db_config)
        logger.info("Demo seed ready")


def create_app(settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    """Application factory.

    `container` lets tests inject in-memory repositories; when it is given the
    database bootstrap is skipped entirely.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_CONTENT_LENGTH", MAX_UPLOAD_BYTES))
    app.config["CRON_SECRET"] = getattr(settings, "CRON_SECRET", "") or ""
    upload_folder = os.path.abspath(getattr(settings, "UPLOAD_FOLDER", "uploads"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings)
        container = build_container(settings=settings)
    app.extensions["container"] = container

    register_users(app, container)
    register_days(app, container)
    register_sessions(app, container)
    register_attendance(app, container)
    register_submissions(app, container)
    register_progress(app, container)
    register_cache(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/uploads/<path:filename>", methods=["GET"], endpoint="uploaded_file")
    def uploaded_file(filename: str):
        return send_from_directory(upload_folder, filename)

    @app.errorhandler(413)
    def too_large(_e):
        return jsonify({"success": False, "message": "Uploaded file is too large"}), 413

    if bool(getattr(settings, "SWEEPER_ENABLED", False)) and not app.config["TESTING"]:
        container.sweeper.start()

    return app
