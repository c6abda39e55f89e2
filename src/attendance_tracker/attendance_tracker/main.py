from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.datetime_utils import set_local_timezone
from .core.constants import DEFAULT_REMINDER_TIMEZONE
from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .assistant.controller import register as register_assistant
from .attendance.controller import register as register_attendance
from .goals.controller import register as register_goals
from .reminders.controller import register as register_reminders
from .sharing.controller import register as register_sharing
from .stats.controller import register as register_stats
from .subjects.controller import register as register_subjects
from .timetable.controller import register as register_timetable
from .users.controller import register as register_users

log = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def register_routes(app: Flask, container: Container) -> None:
    register_users(app, container)
    register_subjects(app, container)
    register_timetable(app, container)
    register_attendance(app, container)
    register_stats(app, container)
    register_goals(app, container)
    register_reminders(app, container)
    register_sharing(app, container)
    register_assistant(app, container)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    timezone = getattr(settings, "REMINDER_TIMEZONE", DEFAULT_REMINDER_TIMEZONE)
    set_local_timezone(timezone)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        log.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            log.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            goals_dir=getattr(settings, "GOALS_DIR", "instance/goals"),
            ai_api_key=getattr(settings, "AI_API_KEY", ""),
            ai_gateway_url=getattr(settings, "AI_GATEWAY_URL"),
            ai_model=getattr(settings, "AI_MODEL"),
            ai_timeout=float(getattr(settings, "AI_TIMEOUT_SECONDS", 60)),
            reminder_time=getattr(settings, "REMINDER_TIME", "18:30"),
            reminder_timezone=timezone,
        )

    register_routes(app, container)
    return app
