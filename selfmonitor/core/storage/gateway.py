"""Persistence gateway: the only component that touches the durable store.

Startup calls ``load(defaults)`` once; every later mutation calls
``save(document)``. Store, parse and migration failures never escape these
two calls: load falls back to the defaults and save reports ``False``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from selfmonitor.core.events.event_bus import EventBus
from selfmonitor.core.storage.backup import BackupVault
from selfmonitor.core.storage.errors import MalformedDocument, StorageError
from selfmonitor.core.storage.events import STORAGE_SCHEMA_MIGRATED
from selfmonitor.core.storage.migrations import registry as default_registry
from selfmonitor.core.storage.reconciler import reconcile
from selfmonitor.core.storage.registry import MigrationRegistry
from selfmonitor.core.storage.runner import run_migrations
from selfmonitor.core.storage.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageKeys:
    data: str = "selfmonitor-data"
    version: str = "selfmonitor-schema-version"
    backup: str = "selfmonitor-data-backup"

    @classmethod
    def with_prefix(cls, prefix: str) -> "StorageKeys":
        return cls(data=f"{prefix}-data", version=f"{prefix}-schema-version", backup=f"{prefix}-data-backup")


@dataclass(frozen=True)
class StorageStatus:
    current_version: int
    stored_version: int
    has_backup: bool
    approximate_size_kb: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentVersion": self.current_version,
            "storedVersion": self.stored_version,
            "hasBackup": self.has_backup,
            "approximateSizeKB": self.approximate_size_kb,
        }


def _parse_version(raw: Optional[str]) -> int:
    try:
        return int(raw) if raw is not None else 0
    except (TypeError, ValueError):
        logger.warning("Unreadable schema version %r; treating as 0", raw)
        return 0


def _decode_document(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise MalformedDocument("stored document is not valid JSON") from exc
    if not isinstance(data, dict):
        raise MalformedDocument("stored document is not a JSON object")
    return data


class PersistenceGateway:
    def __init__(
        self,
        store: KeyValueStore,
        registry: Optional[MigrationRegistry] = None,
        keys: Optional[StorageKeys] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.store = store
        self.registry = registry if registry is not None else default_registry
        self.keys = keys or StorageKeys()
        self.event_bus = event_bus
        self.backup = BackupVault(store, self.keys.backup, self.registry)

    @property
    def current_version(self) -> int:
        return self.registry.current_version

    def load(self, defaults: Dict[str, Any]) -> Dict[str, Any]:
        """Read, upgrade if stale, and reconcile the stored document.

        Returns ``defaults`` itself when nothing is stored or when anything
        goes wrong; nothing is written in either case.
        """
        try:
            raw = self.store.get(self.keys.data)
            if not raw:
                return defaults
            data = _decode_document(raw)
            stored_version = _parse_version(self.store.get(self.keys.version))

            if stored_version < self.current_version:
                # Back up before migrating so the user can recover if something goes wrong
                self.backup.snapshot(raw)
                pending = [m.version for m in self.registry.pending(stored_version)]
                data = run_migrations(data, stored_version, self.registry)
                if not isinstance(data, dict):
                    raise MalformedDocument("migrations produced a non-object document")
                self.store.set(self.keys.data, json.dumps(data, ensure_ascii=False))
                self.store.set(self.keys.version, str(self.current_version))
                logger.info("Migrated schema v%s -> v%s", stored_version, self.current_version)
                self._emit(
                    STORAGE_SCHEMA_MIGRATED,
                    {"from_version": stored_version, "to_version": self.current_version, "applied": pending},
                )
            return reconcile(defaults, data)
        except (StorageError, RecursionError):
            logger.exception("Failed to load state; falling back to defaults")
            return defaults

    def save(self, document: Dict[str, Any]) -> bool:
        """Write the document and stamp the current version; never raises."""
        try:
            payload = json.dumps(document, ensure_ascii=False)
            self.store.set(self.keys.data, payload)
            self.store.set(self.keys.version, str(self.current_version))
        except (StorageError, TypeError, ValueError, RecursionError):
            logger.exception("Failed to save state")
            return False
        return True

    def clear(self) -> bool:
        """Drop the live document and version tag; the backup slot stays."""
        try:
            self.store.remove(self.keys.data)
            self.store.remove(self.keys.version)
        except StorageError:
            logger.exception("Failed to clear state")
            return False
        return True

    def status(self) -> StorageStatus:
        try:
            stored_version = _parse_version(self.store.get(self.keys.version))
            raw = self.store.get(self.keys.data) or ""
        except StorageError:
            logger.warning("Store unreadable while collecting status", exc_info=True)
            stored_version, raw = 0, ""
        return StorageStatus(
            current_version=self.current_version,
            stored_version=stored_version,
            has_backup=self.backup.has_backup(),
            # UTF-16 approximation, matching what browsers count against quota
            approximate_size_kb=round(len(raw) * 2 / 1024),
        )

    def _emit(self, event_type: str, payload: Dict[str, Any]) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event_type, payload)


__all__ = ["PersistenceGateway", "StorageKeys", "StorageStatus"]
