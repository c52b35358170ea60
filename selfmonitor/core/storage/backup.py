"""Single-slot pre-migration backup."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from selfmonitor.core.storage.errors import StorageError
from selfmonitor.core.storage.reconciler import reconcile
from selfmonitor.core.storage.registry import MigrationRegistry
from selfmonitor.core.storage.runner import run_migrations
from selfmonitor.core.storage.store import KeyValueStore

logger = logging.getLogger(__name__)


class BackupVault:
    """Holds the raw stored document as it was right before a migration.

    Only the gateway writes here, once per genuine migration event. Nothing
    reads it automatically; ``restore`` is a manual recovery action.
    """

    def __init__(self, store: KeyValueStore, key: str, registry: Optional[MigrationRegistry] = None) -> None:
        self.store = store
        self.key = key
        self.registry = registry

    def snapshot(self, raw: str) -> None:
        self.store.set(self.key, raw)

    def raw(self) -> Optional[str]:
        return self.store.get(self.key)

    def has_backup(self) -> bool:
        try:
            return bool(self.raw())
        except StorageError:
            logger.warning("Backup slot unreadable", exc_info=True)
            return False

    def restore(self, defaults: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Backup upgraded and merged against ``defaults``; ``None`` when absent or unreadable."""
        try:
            raw = self.raw()
            if not raw:
                return None
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                logger.warning("Backup is not a JSON object; ignoring")
                return None
            # The slot does not record its schema version; every step tolerates re-application.
            upgraded = run_migrations(parsed, 0, self.registry)
            return reconcile(defaults, upgraded)
        except (StorageError, ValueError, RecursionError):
            logger.warning("Failed to restore backup", exc_info=True)
            return None


__all__ = ["BackupVault"]
