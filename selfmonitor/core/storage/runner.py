"""Apply pending registry entries to a document."""

from __future__ import annotations

import logging
from typing import Any, Optional

from selfmonitor.core.storage.errors import MigrationFailure
from selfmonitor.core.storage.migrations import registry as default_registry
from selfmonitor.core.storage.registry import MigrationRegistry

logger = logging.getLogger(__name__)


def run_migrations(document: Any, from_version: int, registry: Optional[MigrationRegistry] = None) -> Any:
    """Fold every step newer than ``from_version`` over ``document``, oldest first.

    Calling it again with the registry's current version selects nothing and
    returns the document as given. A step that raises aborts the whole run
    with ``MigrationFailure`` (``RecursionError`` from an over-nested
    document passes through unwrapped); no partially upgraded document escapes.
    """
    if registry is None:
        registry = default_registry

    data = document
    for migration in registry.pending(from_version):
        logger.info("Running migration v%s: %s", migration.version, migration.description)
        try:
            data = migration.up(data)
        except RecursionError:
            # too deeply nested to copy; callers treat this as a malformed document
            raise
        except Exception as exc:
            logger.exception("Migration v%s failed", migration.version)
            raise MigrationFailure(migration.version, migration.description, exc) from exc
    return data


__all__ = ["run_migrations"]
