from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .app_logger import get_logger, setup_logging
from .attendance.controller import register as register_attendance
from .common.validators import require_bounded_int
from .common.web import register_error_handlers
from .container import build_container
from .core.constants import (
    DEFAULT_POLL_DURATION_MINUTES,
    MAX_POLL_DURATION_MINUTES,
    MIN_POLL_DURATION_MINUTES,
)
from .core.exceptions import AttendanceError
from .database.bootstrap import apply_schema, list_tables
from .polls.controller import register as register_polls
from .polls.service import DurationPolicy

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def load_duration_policy(settings) -> DurationPolicy:
    min_minutes = int(getattr(settings, "ATTENDANCE_MIN_DURATION", MIN_POLL_DURATION_MINUTES))
    max_minutes = int(getattr(settings, "ATTENDANCE_MAX_DURATION", MAX_POLL_DURATION_MINUTES))
    if min_minutes < 1 or max_minutes < min_minutes:
        raise ValueError(f"Invalid attendance duration bounds: {min_minutes}..{max_minutes}")

    raw_default = getattr(settings, "ATTENDANCE_DEFAULT_DURATION", DEFAULT_POLL_DURATION_MINUTES)
    try:
        default_minutes = require_bounded_int(
            raw_default, "ATTENDANCE_DEFAULT_DURATION", min_value=min_minutes, max_value=max_minutes
        )
    except AttendanceError as e:
        raise ValueError(f"Invalid environment variables: {e.message}") from e

    return DurationPolicy(default_minutes=default_minutes, min_minutes=min_minutes, max_minutes=max_minutes)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logger = setup_logging(getattr(settings, "LOG_LEVEL", None))
    log = get_logger(__name__)

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    durations = load_duration_policy(settings)

    log.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        log.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(db_config=db_config, durations=durations)

    register_error_handlers(app)
    register_polls(app, container)
    register_attendance(app, container)

    logger.debug("routes registered: %s", sorted(r.endpoint for r in app.url_map.iter_rules()))
    return app
