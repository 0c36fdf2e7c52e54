from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from logging.config import dictConfig
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .common.web import register_error_handlers
from .announcements.controller import register as register_announcements
from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .dashboard.controller import register as register_dashboard
from .payments.controller import register as register_payments
from .services.controller import register as register_services
from .students.controller import register as register_students
from .teachers.controller import register as register_teachers
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory. Pass a ready container to skip database wiring."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging_settings = getattr(settings, "LOGGING", None)
    if logging_settings:
        dictConfig(logging_settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False
    app.config["SESSION_DAYS"] = int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS))
    app.permanent_session_lifetime = timedelta(days=app.config["SESSION_DAYS"])

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
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            absence_threshold=int(getattr(settings, "FREQUENT_ABSENCE_THRESHOLD", 3)),
            absence_days=int(getattr(settings, "FREQUENT_ABSENCE_DAYS", 30)),
        )

    app.extensions["dabestan.container"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_teachers(app, container)
    register_classes(app, container)
    register_students(app, container)
    register_attendance(app, container)
    register_payments(app, container)
    register_services(app, container)
    register_announcements(app, container)
    register_dashboard(app, container)

    return app
