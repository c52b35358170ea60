"""Migration runner: ordering, idempotence, and failure handling."""

from __future__ import annotations

import pytest

from selfmonitor.core.storage.errors import MigrationFailure
from selfmonitor.core.storage.migrations import CURRENT_SCHEMA_VERSION
from selfmonitor.core.storage.registry import Migration, MigrationRegistry
from selfmonitor.core.storage.runner import run_migrations

pytestmark = pytest.mark.unit


def _recording_registry(calls):
    def step(version):
        def up(doc):
            calls.append(version)
            return {**(doc or {}), f"v{version}": True}

        return up

    return MigrationRegistry([Migration(v, f"step {v}", step(v)) for v in (1, 2, 3)])


def test_runs_pending_steps_in_version_order():
    calls = []
    reg = _recording_registry(calls)
    result = run_migrations({"tasks": []}, 0, reg)
    assert calls == [1, 2, 3]
    assert result == {"tasks": [], "v1": True, "v2": True, "v3": True}


def test_skips_already_applied_steps():
    calls = []
    reg = _recording_registry(calls)
    run_migrations({}, 2, reg)
    assert calls == [3]


def test_second_run_at_current_version_is_noop():
    calls = []
    reg = _recording_registry(calls)
    doc = {"tasks": [{"id": "a"}]}
    upgraded = run_migrations(doc, 1, reg)
    calls.clear()

    again = run_migrations(upgraded, reg.current_version, reg)

    assert calls == []
    assert again is upgraded


def test_empty_or_missing_document_does_not_raise():
    assert isinstance(run_migrations(None, 0), dict)
    upgraded = run_migrations({}, 0)
    assert upgraded["planning"]["gtdInbox"] == []
    assert upgraded["promptLibrary"] == {"prompts": [], "collections": []}
    assert upgraded["timeBlocks"] == []


def test_shipped_chain_upgrades_bare_document():
    doc = {"tasks": [{"id": "a", "title": "Write"}], "habits": [{"id": "h"}]}
    upgraded = run_migrations(doc, 0)
    assert upgraded["tasks"] == doc["tasks"]
    assert upgraded["habits"][0]["streakFreezes"] == 1
    assert upgraded["notificationRules"] == []
    assert run_migrations(upgraded, CURRENT_SCHEMA_VERSION) is upgraded


def test_failing_step_raises_migration_failure():
    def broken(doc):
        raise KeyError("boom")

    reg = MigrationRegistry([Migration(1, "ok", lambda d: d), Migration(2, "broken step", broken)])

    with pytest.raises(MigrationFailure) as excinfo:
        run_migrations({"tasks": []}, 0, reg)

    assert excinfo.value.version == 2
    assert excinfo.value.description == "broken step"
    assert isinstance(excinfo.value.__cause__, KeyError)
