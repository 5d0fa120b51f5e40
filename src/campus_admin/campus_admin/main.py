from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .admin.controller import register as register_admin
from .announcements.controller import register as register_announcements
from .assignments.controller import register as register_assignments
from .attendance.controller import register as register_attendance
from .common.errors import register_error_handlers
from .common.json_provider import DomainJSONProvider
from .container import Container, build_container
from .core.constants import DEFAULT_JWT_EXP_MINUTES, DEFAULT_RESET_TOKEN_MINUTES
from .courses.controller import register as register_courses
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .faculty.controller import register as register_faculty
from .grading.controller import register as register_grading
from .notifications.mailer import build_mailer
from .students.controller import register as register_students
from .submissions.controller import register as register_submissions
from .users.controller import register as register_users

logger = logging.getLogger("campus_admin")


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory. A prebuilt ``container`` skips all database setup."""
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = DomainJSONProvider(app)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

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
            apply_schema(db_config)
            admin_email = getattr(settings, "ADMIN_EMAIL", None)
            admin_password = getattr(settings, "ADMIN_PASSWORD", None)
            if admin_email and admin_password:
                ensure_admin_user(db_config, email=admin_email, password=admin_password)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            jwt_secret=str(getattr(settings, "JWT_SECRET", None) or app.secret_key),
            jwt_exp_minutes=int(getattr(settings, "JWT_EXP_MINUTES", DEFAULT_JWT_EXP_MINUTES)),
            mailer=build_mailer(settings),
            reset_token_minutes=int(getattr(settings, "RESET_TOKEN_MINUTES", DEFAULT_RESET_TOKEN_MINUTES)),
        )

    register_error_handlers(app)
    register_users(app, container)
    register_students(app, container)
    register_faculty(app, container)
    register_courses(app, container)
    register_attendance(app, container)
    register_assignments(app, container)
    register_submissions(app, container)
    register_grading(app, container)
    register_announcements(app, container)
    register_admin(app, container)

    return app
