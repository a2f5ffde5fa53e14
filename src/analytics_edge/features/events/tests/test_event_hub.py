from __future__ import annotations

from datetime import UTC, datetime

import pytest
import simpy

from analytics_edge.features.events.schema import EventSource, EventType
from analytics_edge.features.events.service import CounterEventIdGenerator, EventHub

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _hub() -> tuple[simpy.Environment, EventHub]:
    env = simpy.Environment()
    hub = EventHub(env=env, ids=CounterEventIdGenerator(), start_dt=T0)
    hub.start()
    return env, hub


def _track(hub: EventHub, data=None):
    return hub.dispatch(
        name="track",
        event_type=EventType.GENERIC_TRACK,
        event_source=EventSource.REQUEST_CONTENT,
        data=data,
    )


def test_dispatch_numbers_and_ids_events():
    env, hub = _hub()
    env.run(until=12.0)

    e1 = _track(hub)
    e2 = _track(hub)

    assert (e1.id, e1.number) == ("evt_00000001", 1)
    assert (e2.id, e2.number) == ("evt_00000002", 2)
    assert e1.timestamp == datetime(2026, 1, 1, 0, 0, 12, tzinfo=UTC)


def test_unknown_event_type_raises():
    _, hub = _hub()

    with pytest.raises(ValueError):
        hub.dispatch(name="x", event_type="com.example.other", event_source=EventSource.REQUEST_CONTENT)


def test_listeners_see_matching_events_in_order():
    env, hub = _hub()
    seen: list[str] = []
    hub.register_listener(EventType.GENERIC_TRACK, EventSource.REQUEST_CONTENT, lambda e: seen.append(e.id))
    hub.register_listener(EventType.CONFIGURATION, EventSource.RESPONSE_CONTENT, lambda e: seen.append("cfg"))

    _track(hub)
    _track(hub)
    env.run()

    assert seen == ["evt_00000001", "evt_00000002"]


def test_generator_listener_finishes_before_next_event():
    env, hub = _hub()
    log: list[tuple[str, float]] = []

    def slow(event):
        log.append((f"start {event.number}", env.now))
        yield env.timeout(1.0)
        log.append((f"end {event.number}", env.now))

    hub.register_listener(EventType.GENERIC_TRACK, EventSource.REQUEST_CONTENT, slow)
    _track(hub)
    _track(hub)
    env.run()

    assert log == [("start 1", 0), ("end 1", 1.0), ("start 2", 1.0), ("end 2", 2.0)]


def test_listener_waits_until_ready():
    env, hub = _hub()
    seen: list[int] = []
    hub.register_listener(
        EventType.GENERIC_TRACK,
        EventSource.REQUEST_CONTENT,
        lambda e: seen.append(e.number),
        ready=lambda e: hub.get_shared_state("config", e) is not None,
    )

    _track(hub)
    env.run()
    assert seen == []

    hub.set_shared_state("config", {"global.privacy": "optedin"})
    env.run()
    assert seen == [1]


def test_shared_state_is_versioned_by_event():
    _, hub = _hub()

    early = _track(hub)
    hub.set_shared_state("config", {"v": 1})
    middle = _track(hub)
    hub.set_shared_state("config", {"v": 2})
    late = _track(hub)

    # an event older than every state sees the first one
    assert hub.get_shared_state("config", early) == {"v": 1}
    assert hub.get_shared_state("config", middle) == {"v": 1}
    assert hub.get_shared_state("config", late) == {"v": 2}
    assert hub.get_shared_state("config") == {"v": 2}
    assert hub.get_shared_state("missing", late) is None
