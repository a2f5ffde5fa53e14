from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

import simpy

from analytics_edge.core.config import ApplicationConfig, ExtensionConfig
from analytics_edge.core.constants import (
    ANALYTICS_XDM_EVENT_NAME,
    FRIENDLY_NAME,
    Assurance,
    Configuration,
)
from analytics_edge.core.logging import get_logger, set_level
from analytics_edge.core.types import AppStateLookup
from analytics_edge.features.app_state.service import ApplicationStateOwner, fixed_state_provider
from analytics_edge.features.datastore.duckdb_adapter import DuckDBAdapter
from analytics_edge.features.datastore.service import NamedCollectionDataStore
from analytics_edge.features.events.schema import Event, EventSource, EventType
from analytics_edge.features.events.service import EventHub, IdGenerator
from analytics_edge.features.hits.schema import (
    AppContext,
    AssuranceSnapshot,
    TrackRequest,
    local_timezone_offset_minutes,
)
from analytics_edge.features.identity.migration import IdentityMigrator, default_sources
from analytics_edge.features.identity.service import PersistentIdentityStore
from analytics_edge.features.identity.types import MigrationResult
from analytics_edge.features.track.normalize import (
    track_request_from_consequence,
    track_request_from_event,
)
from analytics_edge.features.track.service import TrackEventProcessor, build_edge_event_data

_logger = get_logger(__name__)


class HitTransport(Protocol):
    """
    Network collaborator. Receives the outbound edge event for every accepted hit.
    """

    def send(self, event: Event) -> None: ...


@dataclass
class RecordingTransport:
    events: list[Event] = field(default_factory=list)

    def send(self, event: Event) -> None:
        self.events.append(event)


class AnalyticsExtension:
    """
    Listens for track intents and configuration changes on the hub and forwards
    assembled legacy hits as edge requests.

    Identity migration runs in the constructor, so no listener can observe a
    half-migrated identity.
    """

    def __init__(
        self,
        *,
        hub: EventHub,
        identity: PersistentIdentityStore,
        migrator: IdentityMigrator,
        app_state: ApplicationStateOwner,
        application: ApplicationConfig,
        app_state_timeout_s: float,
        processor: TrackEventProcessor | None = None,
    ) -> None:
        self._hub = hub
        self._identity = identity
        self._app_state = app_state
        self._application = application
        self._app_state_timeout_s = app_state_timeout_s
        self._processor = processor or TrackEventProcessor()

        self.migration: MigrationResult = migrator.migrate(identity)

    @property
    def identity(self) -> PersistentIdentityStore:
        return self._identity

    def on_registered(self) -> None:
        ready = self.ready_for_event
        self._hub.register_listener(
            EventType.GENERIC_TRACK, EventSource.REQUEST_CONTENT, self.handle_analytics_request, ready=ready
        )
        self._hub.register_listener(
            EventType.RULES_ENGINE, EventSource.RESPONSE_CONTENT, self.handle_rules_engine_response, ready=ready
        )
        self._hub.register_listener(
            EventType.CONFIGURATION, EventSource.RESPONSE_CONTENT, self.handle_configuration_response, ready=ready
        )
        self._app_state.start()
        _logger.info(f"{FRIENDLY_NAME} registered", extra={"feature": "extension"})

    def ready_for_event(self, event: Event) -> bool:
        return self._hub.get_shared_state(Configuration.SHARED_STATE_NAME, event) is not None

    # ----------------------------
    # Listeners
    # ----------------------------
    def handle_analytics_request(self, event: Event):
        request = track_request_from_event(event)
        if request is None:
            return None
        return self._track(event, request)

    def handle_rules_engine_response(self, event: Event):
        request = track_request_from_consequence(event)
        if request is None:
            return None
        return self._track(event, request)

    def handle_configuration_response(self, event: Event) -> None:
        if event.data is None:
            _logger.debug(
                "ignoring configuration event with no data",
                extra={"event_id": event.id, "reason": "empty"},
            )
            return

        if self._processor.privacy.is_opt_out_transition(event.data):
            self._identity.clear()
            _logger.info(
                "privacy opted out, cleared persisted identifiers",
                extra={"event_id": event.id, "privacy": "optedout"},
            )

    # ----------------------------
    # Internal helpers
    # ----------------------------
    def _track(self, event: Event, request: TrackRequest):
        config = self._hub.get_shared_state(Configuration.SHARED_STATE_NAME, event)
        if self._processor.admit(request, config) is None:
            return

        lookup: AppStateLookup = yield from self._app_state.lookup(self._app_state_timeout_s)

        hit = self._processor.handle(
            request,
            config,
            self._identity.snapshot(),
            self._assurance(event),
            self._app_context(lookup),
        )
        if hit is None:
            return

        self._hub.dispatch(
            name=ANALYTICS_XDM_EVENT_NAME,
            event_type=EventType.EDGE,
            event_source=EventSource.REQUEST_CONTENT,
            data=build_edge_event_data(hit),
        )

    def _assurance(self, event: Event) -> AssuranceSnapshot:
        state = self._hub.get_shared_state(Assurance.SHARED_STATE_NAME, event) or {}
        session_id = state.get(Assurance.SESSION_ID)
        return AssuranceSnapshot(debug_session_id=session_id if isinstance(session_id, str) else None)

    def _app_context(self, lookup: AppStateLookup) -> AppContext:
        app = self._application
        offset = app.timezone_offset_minutes
        return AppContext(
            name=app.name,
            version=app.version,
            build=app.build,
            timezone_offset_minutes=local_timezone_offset_minutes() if offset is None else offset,
            app_state=lookup,
        )


@dataclass(frozen=True)
class BootstrapResult:
    env: simpy.Environment
    hub: EventHub
    extension: AnalyticsExtension
    adapter: DuckDBAdapter
    transport: HitTransport


def bootstrap_extension(
    cfg: ExtensionConfig,
    *,
    transport: HitTransport | None = None,
    ids: IdGenerator | None = None,
    start_dt: datetime | None = None,
) -> BootstrapResult:
    """
    Open storage, migrate identity, arm listeners. The caller owns adapter.close().
    """
    set_level(cfg.logging.level)
    logger = get_logger("analytics_edge", cfg.logging.level)

    env = simpy.Environment()
    hub = EventHub(env=env, ids=ids, start_dt=start_dt)

    # ----- storage -----
    adapter = DuckDBAdapter(path=cfg.datastore.duckdb_path, clean_slate=cfg.datastore.clean_slate)
    adapter.open()
    current = NamedCollectionDataStore(adapter=adapter, name=cfg.datastore.collection)
    legacy = NamedCollectionDataStore(adapter=adapter, name=cfg.datastore.legacy_collection)

    # ----- application state owner -----
    owner = ApplicationStateOwner(
        env=env,
        provider=fixed_state_provider(cfg.application.state),
        latency_s=cfg.application.state_latency_s,
    )

    extension = AnalyticsExtension(
        hub=hub,
        identity=PersistentIdentityStore(current),
        migrator=IdentityMigrator(sources=default_sources(legacy)),
        app_state=owner,
        application=cfg.application,
        app_state_timeout_s=cfg.app_state.timeout_s,
    )
    extension.on_registered()

    # ----- outbound -----
    out = transport if transport is not None else RecordingTransport()
    hub.register_listener(EventType.EDGE, EventSource.REQUEST_CONTENT, out.send)

    hub.start()
    logger.info(
        "extension started",
        extra={"feature": "bootstrap", "reason": "skipped" if extension.migration.skipped else "migrated"},
    )
    return BootstrapResult(env=env, hub=hub, extension=extension, adapter=adapter, transport=out)
