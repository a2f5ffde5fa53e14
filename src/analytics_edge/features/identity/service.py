from __future__ import annotations

from typing import Any

from analytics_edge.core.constants import DataStoreKeys
from analytics_edge.core.logging import get_logger
from analytics_edge.features.datastore.duckdb_adapter import DataStoreError
from analytics_edge.features.datastore.service import KeyValueStore

from .types import PersistedIdentity

_logger = get_logger(__name__)


class PersistentIdentityStore:
    """
    Typed accessor over the extension's own key/value collection.

    Writers:
    - IdentityMigrator, once per install
    - the opt-out handler, via clear()
    Read failures are logged and reported as "absent"; they never reach a track call.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ----------------------------
    # Reads
    # ----------------------------
    @property
    def analytics_id(self) -> str | None:
        return _non_empty_str(self._read(DataStoreKeys.AID))

    @property
    def visitor_id(self) -> str | None:
        return _non_empty_str(self._read(DataStoreKeys.VID))

    @property
    def ignore_analytics_id(self) -> bool | None:
        value = self._read(DataStoreKeys.IGNORE_AID)
        return value if isinstance(value, bool) else None

    @property
    def migration_completed(self) -> bool:
        return self._read(DataStoreKeys.DATA_MIGRATED) is True

    def snapshot(self) -> PersistedIdentity:
        return PersistedIdentity(
            analytics_id=self.analytics_id,
            visitor_id=self.visitor_id,
            ignore_analytics_id=self.ignore_analytics_id,
            migration_completed=self.migration_completed,
        )

    # ----------------------------
    # Writes
    # ----------------------------
    def set_analytics_id(self, value: str | None) -> None:
        self._store.set(DataStoreKeys.AID, value)

    def set_visitor_id(self, value: str | None) -> None:
        self._store.set(DataStoreKeys.VID, value)

    def set_ignore_analytics_id(self, value: bool | None) -> None:
        self._store.set(DataStoreKeys.IGNORE_AID, value)

    def mark_migration_completed(self) -> None:
        self._store.set(DataStoreKeys.DATA_MIGRATED, True)

    def clear(self) -> None:
        """
        Remove AID, VID and the ignore flag. The migration marker stays so a
        later cold start does not re-import legacy ids the user opted out of.
        """
        for key in (DataStoreKeys.AID, DataStoreKeys.VID, DataStoreKeys.IGNORE_AID):
            try:
                self._store.remove(key)
            except DataStoreError as exc:
                _logger.warning(
                    f"failed to remove {key}: {exc}",
                    extra={"feature": "identity", "reason": "storage"},
                )

    # ----------------------------
    # Internal helpers
    # ----------------------------
    def _read(self, key: str) -> Any | None:
        try:
            return self._store.get(key)
        except DataStoreError as exc:
            _logger.warning(
                f"failed to read {key}: {exc}",
                extra={"feature": "identity", "reason": "storage"},
            )
            return None


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None
