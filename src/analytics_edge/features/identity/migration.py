from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from analytics_edge.core.logging import get_logger
from analytics_edge.features.datastore.duckdb_adapter import DataStoreError
from analytics_edge.features.datastore.service import KeyValueStore

from .service import PersistentIdentityStore
from .types import MigrationResult

_logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LegacyGeneration:
    """
    Key layout of one older SDK generation.

    vid_keys are tried in order; the first non-empty value wins.
    transient_keys are never migrated, only deleted.
    """

    name: str
    aid_key: str
    vid_keys: tuple[str, ...]
    ignore_aid_key: str
    transient_keys: tuple[str, ...] = ()

    @property
    def all_keys(self) -> tuple[str, ...]:
        return (self.aid_key, *self.vid_keys, self.ignore_aid_key, *self.transient_keys)


_V5_PREFIX = "Adobe.AnalyticsDataStorage."

V5_GENERATION = LegacyGeneration(
    name="v5",
    aid_key=f"{_V5_PREFIX}ADOBEMOBILE_STOREDDEFAULTS_AID",
    vid_keys=(
        f"{_V5_PREFIX}ADOBEMOBILE_STOREDDEFAULTS_VISITOR_IDENTIFIER",
        # some v4 installs had their VID moved into the identity store during the v5 upgrade
        "Adobe.visitorIDServiceDataStore.ADOBEMOBILE_VISITOR_ID",
    ),
    ignore_aid_key=f"{_V5_PREFIX}ADOBEMOBILE_STOREDDEFAULTS_IGNOREAID",
    transient_keys=(f"{_V5_PREFIX}mostRecentHitTimestampSeconds",),
)

V4_GENERATION = LegacyGeneration(
    name="v4",
    aid_key="ADOBEMOBILE_STOREDDEFAULTS_AID",
    vid_keys=("AOMS_AppMeasurement_StoredDefaults_VisitorID",),
    ignore_aid_key="ADOBEMOBILE_STOREDDEFAULTS_IGNOREAID",
    transient_keys=(
        "ADOBEMOBILE_STOREDDEFAULTS_AIDSYNCED",
        "ADBMobileLastTimestamp",
        "ANALYTICS_WORKER_CURRENT_ID",
        "ANALYTICS_WORKER_CURRENT_STAMP",
    ),
)

# Most recent generation first.
DEFAULT_GENERATIONS: tuple[LegacyGeneration, ...] = (V5_GENERATION, V4_GENERATION)


class LegacyIdentitySource:
    """
    Uniform read/delete view over one legacy generation.
    """

    def __init__(self, *, generation: LegacyGeneration, store: KeyValueStore) -> None:
        self.generation = generation
        self._store = store

    @property
    def name(self) -> str:
        return self.generation.name

    def read_aid(self) -> str | None:
        return _as_id(self._read(self.generation.aid_key))

    def read_vid(self) -> str | None:
        for key in self.generation.vid_keys:
            vid = _as_id(self._read(key))
            if vid is not None:
                return vid
        return None

    def read_ignore_aid(self) -> bool | None:
        return _as_flag(self._read(self.generation.ignore_aid_key))

    def delete_all(self) -> int:
        """
        Delete every key of this generation. Returns the number of failed deletes.
        """
        failures = 0
        for key in self.generation.all_keys:
            try:
                self._store.remove(key)
            except DataStoreError as exc:
                failures += 1
                _logger.warning(
                    f"failed to delete legacy key {key}: {exc}",
                    extra={"feature": "migration", "reason": "storage"},
                )
        return failures

    def _read(self, key: str) -> Any | None:
        try:
            return self._store.get(key)
        except DataStoreError as exc:
            _logger.warning(
                f"failed to read legacy key {key}: {exc}",
                extra={"feature": "migration", "reason": "storage"},
            )
            return None


def default_sources(legacy_store: KeyValueStore) -> list[LegacyIdentitySource]:
    return [LegacyIdentitySource(generation=g, store=legacy_store) for g in DEFAULT_GENERATIONS]


class IdentityMigrator:
    """
    One-shot reconciliation of AID/VID from older storage generations.

    - Sources are walked in priority order; a field is filled by the first source
      that has it and is never overwritten by a later one.
    - Values already present in the current store win over every legacy source.
    - Every legacy key of every generation is deleted afterwards, found or not.
    - The completion marker is written even if cleanup partially failed.
    """

    def __init__(self, *, sources: Sequence[LegacyIdentitySource]) -> None:
        self.sources = list(sources)

    def migrate(self, identity: PersistentIdentityStore) -> MigrationResult:
        if identity.migration_completed:
            _logger.debug("migration already completed", extra={"feature": "migration"})
            return MigrationResult(skipped=True)

        contributors: list[str] = []
        migrated: list[str] = []
        try:
            self._copy(identity, contributors, migrated)
        except DataStoreError as exc:
            _logger.warning(
                f"failed to write migrated identity: {exc}",
                extra={"feature": "migration", "reason": "storage"},
            )

        failures = sum(source.delete_all() for source in self.sources)

        try:
            identity.mark_migration_completed()
        except DataStoreError as exc:
            _logger.error(
                f"failed to persist migration marker: {exc}",
                extra={"feature": "migration", "reason": "storage"},
            )

        result = MigrationResult(
            skipped=False,
            sources=tuple(contributors),
            migrated_fields=tuple(migrated),
            cleanup_failures=failures,
        )
        _logger.info(
            f"identity migration done: fields={list(result.migrated_fields)} "
            f"sources={list(result.sources)} cleanup_failures={failures}",
            extra={"feature": "migration"},
        )
        return result

    def _copy(
        self,
        identity: PersistentIdentityStore,
        contributors: list[str],
        migrated: list[str],
    ) -> None:
        aid = identity.analytics_id
        vid = identity.visitor_id

        for source in self.sources:
            legacy_aid = source.read_aid()
            legacy_vid = source.read_vid()
            if legacy_aid is None and legacy_vid is None:
                continue

            used = False
            if aid is None and legacy_aid is not None:
                aid = legacy_aid
                identity.set_analytics_id(aid)
                migrated.append("aid")
                used = True

                # the ignore flag describes the AID it was stored with
                ignore = source.read_ignore_aid()
                if ignore is not None:
                    identity.set_ignore_analytics_id(ignore)
                    migrated.append("ignoreaid")

            if vid is None and legacy_vid is not None:
                vid = legacy_vid
                identity.set_visitor_id(vid)
                migrated.append("vid")
                used = True

            if used:
                contributors.append(source.name)

            if aid is not None and vid is not None:
                break


def _as_id(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _as_flag(value: Any) -> bool | None:
    # v4 wrote booleans, some wrappers wrote 0/1 or "true"/"false"
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return None
