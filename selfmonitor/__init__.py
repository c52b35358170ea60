"""selfmonitor application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask

from selfmonitor.config import engine_options_from_uri, config_by_name
from selfmonitor.core.events.event_bus import event_bus
from selfmonitor.extensions import init_extensions


def create_app(config_name: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """Create and configure the selfmonitor Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(
        __name__,
        instance_path=str(instance_root),
        instance_relative_config=True,
    )
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    if overrides:
        app.config.update(overrides)
        if "SQLALCHEMY_DATABASE_URI" in overrides and "SQLALCHEMY_ENGINE_OPTIONS" not in overrides:
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_from_uri(overrides["SQLALCHEMY_DATABASE_URI"])

    instance_root.mkdir(parents=True, exist_ok=True)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    app.extensions["event_bus"] = event_bus
    _init_state(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    from selfmonitor.scripts.data_commands import register_commands

    register_commands(app)

    return app


def _init_state(app: Flask) -> None:
    """Build the persistence stack and run the one startup load."""
    from selfmonitor.core.state.services import StateService
    from selfmonitor.core.storage import (
        MemoryKeyValueStore,
        PersistenceGateway,
        PortableCodec,
        SqlKeyValueStore,
        StorageKeys,
    )

    backend = app.config.get("STATE_STORE_BACKEND", "sql")
    store = SqlKeyValueStore() if backend == "sql" else MemoryKeyValueStore()
    gateway = PersistenceGateway(
        store,
        keys=StorageKeys.with_prefix(app.config.get("STATE_KEY_PREFIX", "selfmonitor")),
        event_bus=event_bus,
    )
    codec = PortableCodec(gateway.registry, filename_prefix=app.config.get("EXPORT_FILENAME_PREFIX", "selfmonitor-backup"))
    service = StateService(gateway, codec=codec, event_bus=event_bus)
    app.extensions["state_service"] = service

    if app.config.get("STATE_AUTOLOAD", True):
        with app.app_context():
            service.load()


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from selfmonitor.core.state.controllers import state_api_bp

    app.register_blueprint(state_api_bp, url_prefix="/api")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
