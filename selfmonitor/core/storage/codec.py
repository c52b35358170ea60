"""Portable export/import format.

Exports wrap the aggregate as ``{"schemaVersion": <int>, "data": {...}}``.
Imports accept that shape or a bare aggregate from before versioned
exports existed (treated as version 0), and always run the result through
the same migrations and reconciliation as a normal load.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import date
from typing import Any, Dict, Optional, Tuple, Union

from selfmonitor.core.storage.errors import MalformedDocument
from selfmonitor.core.storage.migrations import registry as default_registry
from selfmonitor.core.storage.reconciler import reconcile
from selfmonitor.core.storage.registry import MigrationRegistry
from selfmonitor.core.storage.runner import run_migrations

logger = logging.getLogger(__name__)

Blob = Union[str, bytes, bytearray, Dict[str, Any]]


class PortableCodec:
    def __init__(self, registry: Optional[MigrationRegistry] = None, filename_prefix: str = "selfmonitor-backup") -> None:
        self.registry = registry if registry is not None else default_registry
        self.filename_prefix = filename_prefix

    @property
    def current_version(self) -> int:
        return self.registry.current_version

    def export(self, document: Dict[str, Any]) -> str:
        return json.dumps(
            {"schemaVersion": self.current_version, "data": document},
            indent=2,
            ensure_ascii=False,
        )

    def export_filename(self, today: Optional[date] = None) -> str:
        day = today or date.today()
        return f"{self.filename_prefix}-{day.isoformat()}.json"

    def unwrap(self, blob: Blob) -> Tuple[Dict[str, Any], int]:
        """Decode ``blob`` into ``(document, schema_version)`` without migrating."""
        if isinstance(blob, (bytes, bytearray)):
            try:
                blob = blob.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise MalformedDocument("import is not UTF-8 text") from exc
        if isinstance(blob, str):
            try:
                parsed = json.loads(blob)
            except (ValueError, RecursionError) as exc:
                raise MalformedDocument("import is not valid JSON") from exc
        else:
            try:
                parsed = copy.deepcopy(blob)
            except RecursionError as exc:
                raise MalformedDocument("import is nested too deeply") from exc

        if not isinstance(parsed, dict):
            raise MalformedDocument("import is not a JSON object")

        if "schemaVersion" in parsed and "data" in parsed:
            version = parsed["schemaVersion"]
            if isinstance(version, bool) or not isinstance(version, int) or version < 0:
                raise MalformedDocument("schemaVersion must be a non-negative integer")
            data = parsed["data"]
            if not isinstance(data, dict):
                raise MalformedDocument("wrapped import data is not a JSON object")
            return data, version
        return parsed, 0

    def import_with_version(self, blob: Blob, defaults: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        """Decode, upgrade and reconcile an exported (or legacy bare) document.

        Returns the reconciled document and the schema version it was
        exported at. Raises ``MalformedDocument`` for undecodable input and
        lets ``MigrationFailure`` propagate; nothing outside the return value
        is touched in either case.
        """
        data, version = self.unwrap(blob)
        try:
            if version < self.current_version:
                logger.info("Importing document at schema v%s; upgrading to v%s", version, self.current_version)
                data = run_migrations(data, version, self.registry)
            return reconcile(defaults, data), version
        except RecursionError as exc:
            raise MalformedDocument("import is nested too deeply") from exc

    def import_document(self, blob: Blob, defaults: Dict[str, Any]) -> Dict[str, Any]:
        return self.import_with_version(blob, defaults)[0]

    import_ = import_document


__all__ = ["PortableCodec"]
