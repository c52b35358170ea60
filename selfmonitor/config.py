"""Application configuration for selfmonitor."""

from __future__ import annotations

import os
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    if url.get_backend_name() == "sqlite":
        return {"pool_pre_ping": True, "connect_args": {"timeout": 30}}
    return {"pool_pre_ping": True}


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/selfmonitor.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))

    # "sql" keeps the aggregate in the kv_entry table; "memory" keeps it for the process lifetime only.
    STATE_STORE_BACKEND = os.environ.get("STATE_STORE_BACKEND", "sql").lower()
    STATE_KEY_PREFIX = os.environ.get("STATE_KEY_PREFIX", "selfmonitor")
    EXPORT_FILENAME_PREFIX = os.environ.get("EXPORT_FILENAME_PREFIX", "selfmonitor-backup")
    STATE_AUTOLOAD = os.environ.get("STATE_AUTOLOAD", "true").lower() in ("1", "true", "yes")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///instance/test.db")
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    STATE_STORE_BACKEND = "memory"


class ProductionConfig(BaseConfig):
    ENV = "production"


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
