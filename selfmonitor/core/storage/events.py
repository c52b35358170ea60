"""Persistence and data-management event catalog."""

from __future__ import annotations

STORAGE_SCHEMA_MIGRATED = "storage.schema.migrated"
STATE_DATA_IMPORTED = "state.data.imported"
STATE_DATA_RESET = "state.data.reset"
STATE_BACKUP_RESTORED = "state.backup.restored"

EVENT_CATALOG = {
    STORAGE_SCHEMA_MIGRATED: {
        "version": "v1",
        "payload": {
            "from_version": "int",
            "to_version": "int",
            "applied": "list[int]",
        },
    },
    STATE_DATA_IMPORTED: {
        "version": "v1",
        "payload": {
            "schema_version": "int",
            "source_version": "int",
            "collections": "dict",
        },
    },
    STATE_DATA_RESET: {
        "version": "v1",
        "payload": {
            "reset_at": "datetime",
            "backup_kept": "bool",
        },
    },
    STATE_BACKUP_RESTORED: {
        "version": "v1",
        "payload": {
            "restored_at": "datetime",
        },
    },
}

__all__ = [
    "EVENT_CATALOG",
    "STORAGE_SCHEMA_MIGRATED",
    "STATE_DATA_IMPORTED",
    "STATE_DATA_RESET",
    "STATE_BACKUP_RESTORED",
]
