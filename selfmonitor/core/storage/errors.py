"""Error kinds raised by the persistence core."""

from __future__ import annotations

from typing import Optional


class StorageError(Exception):
    """Base class for persistence failures."""


class StoreUnavailable(StorageError):
    """Reading or writing the underlying key-value store failed."""


class MalformedDocument(StorageError):
    """Stored or imported text is not JSON or does not decode to an object."""


class MigrationFailure(StorageError):
    """A registered migration step raised while upgrading a document."""

    def __init__(self, version: int, description: str = "", cause: Optional[BaseException] = None) -> None:
        self.version = version
        self.description = description
        self.cause = cause
        message = f"migration v{version} failed"
        if description:
            message = f"{message} ({description})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


__all__ = ["StorageError", "StoreUnavailable", "MalformedDocument", "MigrationFailure"]
