from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .settings import get_settings_module

from .core.exceptions import ConfigurationError, DomainError
from .database.bootstrap import apply_schema, list_tables, seed_demo_data

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .courses.controller import register as register_courses
from .profiles.controller import register as register_profiles

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        body = {"kind": e.kind, "message": str(e)}
        body.update(e.details())
        return jsonify(body), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"kind": e.name.replace(" ", ""), "message": e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e: Exception):
        logger.exception("Unhandled error: %s", e)
        return jsonify({"kind": "InternalError", "message": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Pass a ready `container` (e.g. backed by in-memory repositories) to skip
    MySQL wiring and database bootstrap.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        jwt_secret = getattr(settings, "JWT_SECRET", "")
        if not jwt_secret:
            raise ConfigurationError(f"JWT_SECRET is not configured ({settings_module})")

        db_config = getattr(settings, "DB_CONFIG")
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(db_config=db_config, jwt_secret=jwt_secret)

        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            seed_demo_data(container)
            app.logger.info("demo seed ready")

    app.extensions["university_admin"] = container

    _register_error_handlers(app)
    register_auth(app, container)
    register_profiles(app, container)
    register_courses(app, container)
    register_attendance(app, container)

    return app


def main() -> None:
    app = create_app()
    app.run(debug=app.config["DEBUG"])


if __name__ == "__main__":
    main()
