"""Versioned persistence core: migrations, reconciliation, backup and export."""

from selfmonitor.core.storage.backup import BackupVault
from selfmonitor.core.storage.codec import PortableCodec
from selfmonitor.core.storage.errors import (
    MalformedDocument,
    MigrationFailure,
    StorageError,
    StoreUnavailable,
)
from selfmonitor.core.storage.gateway import PersistenceGateway, StorageKeys, StorageStatus
from selfmonitor.core.storage.migrations import CURRENT_SCHEMA_VERSION, registry
from selfmonitor.core.storage.reconciler import reconcile
from selfmonitor.core.storage.registry import Migration, MigrationRegistry
from selfmonitor.core.storage.runner import run_migrations
from selfmonitor.core.storage.store import KeyValueStore, MemoryKeyValueStore, SqlKeyValueStore

__all__ = [
    "BackupVault",
    "CURRENT_SCHEMA_VERSION",
    "KeyValueStore",
    "MalformedDocument",
    "MemoryKeyValueStore",
    "Migration",
    "MigrationFailure",
    "MigrationRegistry",
    "PersistenceGateway",
    "PortableCodec",
    "SqlKeyValueStore",
    "StorageError",
    "StorageKeys",
    "StorageStatus",
    "StoreUnavailable",
    "reconcile",
    "registry",
    "run_migrations",
]
