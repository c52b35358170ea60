import json

import pytest

from selfmonitor.core.storage.backup import BackupVault
from selfmonitor.core.storage.migrations import registry

pytestmark = pytest.mark.unit

BACKUP_KEY = "selfmonitor-data-backup"


@pytest.fixture()
def vault(store):
    return BackupVault(store, BACKUP_KEY, registry)


def test_empty_slot(vault, defaults):
    assert vault.has_backup() is False
    assert vault.restore(defaults) is None


def test_snapshot_overwrites_single_slot(vault, store):
    vault.snapshot('{"tasks": []}')
    vault.snapshot('{"tasks": [{"id": "b"}]}')
    assert store.get(BACKUP_KEY) == '{"tasks": [{"id": "b"}]}'
    assert vault.has_backup() is True


def test_restore_upgrades_and_reconciles(vault, defaults):
    vault.snapshot(json.dumps({"tasks": [{"id": "a"}], "habits": [{"id": "h"}], "oldKey": 1}))

    restored = vault.restore(defaults)

    assert restored["tasks"] == [{"id": "a"}]
    assert restored["habits"] == [{"id": "h", "streakFreezes": 1, "freezesUsedDates": []}]
    assert restored["planning"] == defaults["planning"]
    assert "oldKey" not in restored


def test_restore_does_not_consume_the_slot(vault, defaults):
    vault.snapshot('{"tasks": []}')
    vault.restore(defaults)
    assert vault.has_backup() is True


@pytest.mark.parametrize("raw", ["{broken", "42", '"text"', pytest.param("[" * 100000, id="runaway-nesting")])
def test_unreadable_backup_restores_nothing(vault, defaults, raw):
    vault.snapshot(raw)
    assert vault.restore(defaults) is None


def test_store_failure_is_soft(vault, store, defaults):
    vault.snapshot('{"tasks": []}')
    store.fail_reads = True
    assert vault.has_backup() is False
    assert vault.restore(defaults) is None
