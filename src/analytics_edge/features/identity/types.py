from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PersistedIdentity:
    """
    Point-in-time copy of the current-generation identity fields.
    """

    analytics_id: str | None = None
    visitor_id: str | None = None
    ignore_analytics_id: bool | None = None
    migration_completed: bool = False


@dataclass(frozen=True, slots=True)
class MigrationResult:
    # True when the marker was already set and no legacy key was touched
    skipped: bool
    # generation names that contributed at least one field, in priority order
    sources: tuple[str, ...] = ()
    migrated_fields: tuple[str, ...] = ()
    cleanup_failures: int = 0
