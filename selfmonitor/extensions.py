"""Shared extensions for the selfmonitor application."""

from pathlib import Path

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Durable key-value persistence lives in a single table managed through these.
db = SQLAlchemy(session_options={"expire_on_commit": False})
migrate = Migrate()


def init_extensions(app) -> None:
    """Initialize all extensions with the Flask app."""
    db.init_app(app)
    migrations_dir = Path(__file__).resolve().parent / "migrations"
    migrate.init_app(app, db, directory=str(migrations_dir))
