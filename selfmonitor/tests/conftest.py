import sys
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config as AlembicConfig

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from selfmonitor import create_app
from selfmonitor.core.events.event_bus import EventBus
from selfmonitor.core.state.defaults import build_default_state
from selfmonitor.core.storage import MemoryKeyValueStore, PersistenceGateway
from selfmonitor.extensions import db


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")
    config.addinivalue_line("markers", "smoke: Quick smoke tests for CI")


def _alembic_config(db_url: str) -> AlembicConfig:
    # No ini file: alembic's fileConfig would disable the application loggers.
    cfg = AlembicConfig()
    cfg.set_main_option("script_location", str(ROOT / "selfmonitor" / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


@pytest.fixture(scope="session")
def migrated_db(tmp_path_factory):
    """Apply migrations once per session to mirror production schema."""
    db_url = f"sqlite:///{tmp_path_factory.mktemp('db') / 'selfmonitor-test.db'}"
    cfg = _alembic_config(db_url)
    command.upgrade(cfg, "head")
    yield db_url
    try:
        command.downgrade(cfg, "base")
    except Exception:
        # Downgrade is optional for local/CI runs; ignore failures to avoid hiding test results.
        pass


# ==================== Core fixtures ====================


@pytest.fixture()
def store():
    return MemoryKeyValueStore()


@pytest.fixture()
def bus():
    return EventBus()


@pytest.fixture()
def defaults():
    return build_default_state()


@pytest.fixture()
def gateway(store, bus):
    return PersistenceGateway(store, event_bus=bus)


# ==================== App fixtures ====================


@pytest.fixture()
def app():
    """Per-test app whose state lives in a fresh in-memory store."""
    app = create_app("testing", overrides={"STATE_STORE_BACKEND": "memory"})
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def sql_app(migrated_db):
    """Per-test app backed by the migrated sqlite database; rows are wiped afterwards."""
    app = create_app(
        "testing",
        overrides={"SQLALCHEMY_DATABASE_URI": migrated_db, "STATE_STORE_BACKEND": "sql"},
    )
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.rollback()
        db.session.execute(sa.text("DELETE FROM kv_entry"))
        db.session.commit()
        db.session.remove()
        ctx.pop()
