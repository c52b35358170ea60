import json

import pytest

from selfmonitor.core.storage.migrations import CURRENT_SCHEMA_VERSION

pytestmark = pytest.mark.integration


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def service(app):
    return app.extensions["state_service"]


def test_status_command(runner, service):
    service.add_item("tasks", {"title": "x"})
    result = runner.invoke(args=["state-status"])
    assert result.exit_code == 0
    assert f"Current schema version: {CURRENT_SCHEMA_VERSION}" in result.output
    assert "Backup present:         no" in result.output


def test_migrations_command_lists_every_step(runner):
    result = runner.invoke(args=["state-migrations"])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == CURRENT_SCHEMA_VERSION
    assert lines[0].startswith("v1: ")


def test_export_then_import(runner, service, tmp_path):
    service.add_item("tasks", {"title": "Exported"})
    out = tmp_path / "backup.json"

    exported = runner.invoke(args=["state-export", "--out", str(out)])
    assert exported.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["schemaVersion"] == CURRENT_SCHEMA_VERSION

    service.reset()
    imported = runner.invoke(args=["state-import", str(out)])

    assert imported.exit_code == 0
    assert "Imported 1 tasks" in imported.output
    assert service.state["tasks"][0]["title"] == "Exported"


def test_import_rejects_garbage(runner, service, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    result = runner.invoke(args=["state-import", str(bad)])
    assert result.exit_code != 0
    assert "invalid file" in result.output


def test_reset_requires_confirmation(runner, service):
    service.add_item("tasks", {"title": "x"})

    aborted = runner.invoke(args=["state-reset"], input="n\n")
    assert aborted.exit_code != 0
    assert len(service.state["tasks"]) == 1

    confirmed = runner.invoke(args=["state-reset", "--yes"])
    assert confirmed.exit_code == 0
    assert service.state["tasks"] == []


def test_restore_backup_command(runner, service):
    missing = runner.invoke(args=["state-restore-backup"])
    assert missing.exit_code != 0
    assert "no backup available" in missing.output

    service.gateway.backup.snapshot(json.dumps({"tasks": [{"id": "b"}]}))
    restored = runner.invoke(args=["state-restore-backup"])
    assert restored.exit_code == 0
    assert service.state["tasks"] == [{"id": "b"}]
