"""Append-only registry of versioned document migrations.

Each entry upgrades the aggregate document by exactly one schema version.
Versions start at 1 (0 means "never migrated") and must strictly increase in
registration order. Shipped entries are never edited; schema changes are
added as a new entry with the next version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

Document = Dict[str, Any]
MigrationStep = Callable[[Any], Document]


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    up: MigrationStep


class MigrationRegistry:
    def __init__(self, migrations: Optional[List[Migration]] = None) -> None:
        self._migrations: List[Migration] = []
        for migration in migrations or []:
            self.add(migration)

    def add(self, migration: Migration) -> Migration:
        if migration.version < 1:
            raise ValueError(f"migration versions start at 1, got {migration.version}")
        if self._migrations and migration.version <= self._migrations[-1].version:
            raise ValueError(
                f"migration v{migration.version} must be greater than v{self._migrations[-1].version}"
            )
        self._migrations.append(migration)
        return migration

    def register(self, version: int, description: str) -> Callable[[MigrationStep], MigrationStep]:
        """Decorator form of ``add``; returns the step function unchanged."""

        def decorator(fn: MigrationStep) -> MigrationStep:
            self.add(Migration(version=version, description=description, up=fn))
            return fn

        return decorator

    @property
    def current_version(self) -> int:
        return self._migrations[-1].version if self._migrations else 0

    def pending(self, from_version: int) -> List[Migration]:
        """Entries newer than ``from_version``, oldest first."""
        selected = [m for m in self._migrations if m.version > from_version]
        return sorted(selected, key=lambda m: m.version)

    def describe(self) -> List[Tuple[int, str]]:
        return [(m.version, m.description) for m in self._migrations]

    def __iter__(self) -> Iterator[Migration]:
        return iter(list(self._migrations))

    def __len__(self) -> int:
        return len(self._migrations)


__all__ = ["Document", "Migration", "MigrationRegistry", "MigrationStep"]
