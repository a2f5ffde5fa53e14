from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from analytics_edge.features.datastore.duckdb_adapter import DataStoreError
from analytics_edge.features.identity.migration import (
    V4_GENERATION,
    V5_GENERATION,
    IdentityMigrator,
    LegacyIdentitySource,
    default_sources,
)
from analytics_edge.features.identity.service import PersistentIdentityStore

# -----------------------
# Test doubles
# -----------------------


@dataclass
class CountingStore:
    data: dict[str, Any] = field(default_factory=dict)
    reads: int = 0
    removes: int = 0
    fail_removes: bool = False

    def get(self, key: str, default: Any | None = None) -> Any | None:
        self.reads += 1
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.removes += 1
        if self.fail_removes:
            raise DataStoreError("remove failed")
        self.data.pop(key, None)


def _setup(legacy_data: dict[str, Any], current_data: dict[str, Any] | None = None):
    legacy = CountingStore(data=dict(legacy_data))
    current = CountingStore(data=dict(current_data or {}))
    identity = PersistentIdentityStore(current)
    migrator = IdentityMigrator(sources=default_sources(legacy))
    return legacy, current, identity, migrator


# -----------------------
# Tests
# -----------------------


def test_higher_priority_generation_wins_and_lower_fills_gaps():
    legacy, _, identity, migrator = _setup(
        {
            V5_GENERATION.aid_key: "a2",
            V4_GENERATION.aid_key: "a1",
            V4_GENERATION.vid_keys[0]: "v1",
        }
    )

    result = migrator.migrate(identity)

    assert identity.analytics_id == "a2"
    assert identity.visitor_id == "v1"
    assert identity.migration_completed is True
    assert result.sources == ("v5", "v4")
    assert set(result.migrated_fields) == {"aid", "vid"}


def test_second_run_is_a_noop_without_legacy_reads():
    legacy, current, identity, migrator = _setup(
        {V5_GENERATION.aid_key: "a2", V4_GENERATION.vid_keys[0]: "v1"}
    )
    migrator.migrate(identity)
    before = dict(current.data)
    reads_before = legacy.reads

    # legacy data reappearing must not be picked up again
    legacy.data[V4_GENERATION.aid_key] = "late"
    result = migrator.migrate(identity)

    assert result.skipped is True
    assert current.data == before
    assert legacy.reads == reads_before


def test_all_legacy_keys_are_deleted_even_when_nothing_found():
    legacy, _, identity, migrator = _setup(
        {
            "ADBMobileLastTimestamp": 1700000000,
            "ANALYTICS_WORKER_CURRENT_ID": "hit-1",
            "Adobe.AnalyticsDataStorage.mostRecentHitTimestampSeconds": 1700000001,
            "unrelated": "keep me",
        }
    )

    result = migrator.migrate(identity)

    assert legacy.data == {"unrelated": "keep me"}
    assert result.migrated_fields == ()
    assert identity.migration_completed is True


def test_ignore_flag_travels_with_its_aid():
    _, _, identity, migrator = _setup(
        {
            V4_GENERATION.aid_key: "a1",
            V4_GENERATION.ignore_aid_key: True,
            V5_GENERATION.ignore_aid_key: False,
        }
    )

    migrator.migrate(identity)

    assert identity.analytics_id == "a1"
    assert identity.ignore_analytics_id is True


def test_v5_falls_back_to_identity_service_vid():
    _, _, identity, migrator = _setup(
        {"Adobe.visitorIDServiceDataStore.ADOBEMOBILE_VISITOR_ID": "vid-from-identity"}
    )

    migrator.migrate(identity)

    assert identity.visitor_id == "vid-from-identity"


def test_existing_current_values_are_not_overwritten():
    _, _, identity, migrator = _setup(
        {V5_GENERATION.aid_key: "legacy-aid", V4_GENERATION.vid_keys[0]: "legacy-vid"},
        current_data={"aid": "current-aid"},
    )

    migrator.migrate(identity)

    assert identity.analytics_id == "current-aid"
    assert identity.visitor_id == "legacy-vid"


def test_cleanup_failures_still_mark_completion():
    legacy, _, identity, migrator = _setup({V4_GENERATION.aid_key: "a1"})
    legacy.fail_removes = True

    result = migrator.migrate(identity)

    assert identity.analytics_id == "a1"
    assert identity.migration_completed is True
    assert result.cleanup_failures == len(V5_GENERATION.all_keys) + len(V4_GENERATION.all_keys)

    reads = legacy.reads
    assert migrator.migrate(identity).skipped is True
    assert legacy.reads == reads


def test_source_parses_loose_ignore_flags():
    store = CountingStore(data={V4_GENERATION.ignore_aid_key: "true"})
    source = LegacyIdentitySource(generation=V4_GENERATION, store=store)
    assert source.read_ignore_aid() is True

    store.data[V4_GENERATION.ignore_aid_key] = 0
    assert source.read_ignore_aid() is False

    store.data[V4_GENERATION.ignore_aid_key] = "maybe"
    assert source.read_ignore_aid() is None


def test_migration_against_duckdb_collections():
    from analytics_edge.features.datastore.duckdb_adapter import DuckDBAdapter
    from analytics_edge.features.datastore.service import NamedCollectionDataStore

    adapter = DuckDBAdapter(path=":memory:")
    adapter.open()
    legacy = NamedCollectionDataStore(adapter=adapter, name="standard.defaults")
    current = NamedCollectionDataStore(adapter=adapter, name="com.adobe.module.analytics")
    legacy.set(V4_GENERATION.aid_key, "a1")
    legacy.set(V4_GENERATION.vid_keys[0], "v1")

    identity = PersistentIdentityStore(current)
    IdentityMigrator(sources=default_sources(legacy)).migrate(identity)

    assert identity.snapshot().analytics_id == "a1"
    assert identity.snapshot().visitor_id == "v1"
    assert legacy.size() == 0
    adapter.close()
