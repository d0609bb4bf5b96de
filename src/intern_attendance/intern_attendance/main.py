from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_GEMINI_MODEL
from .core.logging_setup import configure_logging
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .leaves.controller import register as register_leaves
from .reports.controller import register as register_reports
from .settings.controller import register as register_settings
from .storage.controller import register as register_storage
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing a ready ``container`` skips database bootstrap (used by tests).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)
            logger.info("Demo users ready")

        container = build_container(
            db_config=db_config,
            site_timezone=getattr(settings, "SITE_TIMEZONE", "Asia/Makassar"),
            storage_dir=getattr(settings, "STORAGE_DIR", "storage"),
            cache_path=getattr(settings, "FALLBACK_CACHE_PATH", "storage/attendance_cache.json"),
            cleanup_batch_size=int(getattr(settings, "CLEANUP_BATCH_SIZE", 1000)),
            max_clock_skew_minutes=int(getattr(settings, "MAX_CLOCK_SKEW_MINUTES", 0)),
            gemini_api_key=getattr(settings, "GEMINI_API_KEY", None),
            gemini_model=getattr(settings, "GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        )

    app.extensions["container"] = container

    register_users(app, container)
    register_settings(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_reports(app, container)
    register_storage(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"success": False, "message": "Endpoint tidak ditemukan"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return jsonify({"success": False, "message": "Metode tidak diizinkan"}), 405

    return app
