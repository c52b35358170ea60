"""Key-value store backends.

The persistence gateway only talks to the ``KeyValueStore`` protocol (string
keys, string values). Two backends ship:

* ``MemoryKeyValueStore`` keeps values in a dict. Tests use it, and it can
  simulate a full or disabled store.
* ``SqlKeyValueStore`` keeps one row per key in ``kv_entry`` through
  Flask-SQLAlchemy and needs an application context.

Backends raise ``StoreUnavailable`` for every backend failure so callers
never see driver-specific exceptions.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from selfmonitor.core.storage.errors import StoreUnavailable
from selfmonitor.core.storage.models import KeyValueEntry
from selfmonitor.extensions import db


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Dict-backed store with switches for simulated failures."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, *, quota_bytes: Optional[int] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StoreUnavailable(f"read failed for {key!r}")
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StoreUnavailable(f"write failed for {key!r}")
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StoreUnavailable("quota_exceeded")
        self._data[key] = value

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StoreUnavailable(f"remove failed for {key!r}")
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._data


class SqlKeyValueStore:
    """Rows in ``kv_entry``; each write commits immediately."""

    def get(self, key: str) -> Optional[str]:
        try:
            entry = db.session.get(KeyValueEntry, key)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreUnavailable(f"read failed for {key!r}") from exc
        return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        try:
            entry = db.session.get(KeyValueEntry, key)
            if entry is None:
                db.session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreUnavailable(f"write failed for {key!r}") from exc

    def remove(self, key: str) -> None:
        try:
            entry = db.session.get(KeyValueEntry, key)
            if entry is not None:
                db.session.delete(entry)
                db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreUnavailable(f"remove failed for {key!r}") from exc


__all__ = ["KeyValueStore", "MemoryKeyValueStore", "SqlKeyValueStore"]
