from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .config import get_settings_module
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    logger.info("settings=%s storage=%s", settings_module, backend)

    if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        db_config = getattr(settings, "DB_CONFIG")
        apply_schema(db_config)
        logger.info(
            "schema ready on %s@%s:%s/%s (tables=%d)",
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
            len(list_tables(db_config)),
        )

    container = build_container(settings)
    app.extensions["qr_attendance"] = container

    @app.route("/api/health", endpoint="health")
    def health():
        return jsonify({"status": "OK", "message": "Server is running"})

    register_sessions(app, container)
    register_attendance(app, container)

    return app
