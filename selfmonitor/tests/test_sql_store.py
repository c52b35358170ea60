"""The kv_entry-backed store and a full restart cycle against sqlite."""

import json

import pytest

from selfmonitor import create_app
from selfmonitor.core.storage.gateway import StorageKeys
from selfmonitor.core.storage.migrations import CURRENT_SCHEMA_VERSION
from selfmonitor.core.storage.store import SqlKeyValueStore
from selfmonitor.extensions import db

pytestmark = pytest.mark.integration


def test_get_set_remove(sql_app):
    store = SqlKeyValueStore()
    assert store.get("k") is None

    store.set("k", "one")
    store.set("k", "two")
    assert store.get("k") == "two"

    store.remove("k")
    store.remove("k")
    assert store.get("k") is None


def test_state_persists_across_app_instances(sql_app, migrated_db):
    service = sql_app.extensions["state_service"]
    task = service.add_item("tasks", {"title": "Durable"})

    restarted = create_app(
        "testing",
        overrides={"SQLALCHEMY_DATABASE_URI": migrated_db, "STATE_STORE_BACKEND": "sql"},
    )
    with restarted.app_context():
        reloaded = restarted.extensions["state_service"]
        assert reloaded.get_item("tasks", task["id"])["title"] == "Durable"


def test_stale_rows_are_migrated_on_startup(sql_app, migrated_db):
    keys = StorageKeys.with_prefix(sql_app.config["STATE_KEY_PREFIX"])
    store = SqlKeyValueStore()
    raw = json.dumps({"habits": [{"id": "h1", "name": "Stretch"}]})
    store.set(keys.data, raw)
    store.set(keys.version, "2")

    restarted = create_app(
        "testing",
        overrides={"SQLALCHEMY_DATABASE_URI": migrated_db, "STATE_STORE_BACKEND": "sql"},
    )
    with restarted.app_context():
        state = restarted.extensions["state_service"].state
        assert state["habits"][0]["streakFreezes"] == 1

    # rows were rewritten by the other app's session
    db.session.expire_all()
    assert store.get(keys.version) == str(CURRENT_SCHEMA_VERSION)
    assert store.get(keys.backup) == raw
