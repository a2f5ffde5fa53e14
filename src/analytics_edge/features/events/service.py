from __future__ import annotations

import inspect
import uuid
from collections import defaultdict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import simpy

from analytics_edge.core.logging import get_logger

from .schema import ALLOWED_EVENT_TYPES, Event

_logger = get_logger(__name__)

# A listener either returns None or a SimPy generator that the hub runs to completion.
Listener = Callable[[Event], Any]
ReadyCheck = Callable[[Event], bool]


class IdGenerator(Protocol):
    def next_event_id(self) -> str: ...


@dataclass(slots=True)
class CounterEventIdGenerator:
    """
    Deterministic, monotonic event ids.
    """

    prefix: str = "evt"
    counter: int = 0

    def next_event_id(self) -> str:
        self.counter += 1
        return f"{self.prefix}_{self.counter:08d}"


class UuidEventIdGenerator:
    def next_event_id(self) -> str:
        return str(uuid.uuid4()).upper()


@dataclass(frozen=True, slots=True)
class _Registration:
    event_type: str
    event_source: str
    listener: Listener
    ready: ReadyCheck | None


class EventHub:
    """
    In-order, single-consumer event dispatcher driven by a SimPy environment.

    - dispatch() numbers an event and queues it
    - one process drains the queue; each listener finishes before the next event starts
    - a listener registered with `ready` is held until ready(event) is true,
      re-checked after every shared state update
    - shared states are versioned: an event sees the newest state set before it was
      dispatched, or the first state ever set if it arrived earlier than all of them
    """

    def __init__(
        self,
        *,
        env: simpy.Environment,
        ids: IdGenerator | None = None,
        start_dt: datetime | None = None,
    ) -> None:
        self._env = env
        self._ids = ids or UuidEventIdGenerator()
        self._start_dt = start_dt or datetime.now(UTC)

        self._queue = simpy.Store(env)
        self._registrations: list[_Registration] = []
        self._shared_states: dict[str, list[tuple[int, dict[str, Any]]]] = defaultdict(list)
        self._state_changed = env.event()
        self._last_number = 0
        self._started = False

    @property
    def env(self) -> simpy.Environment:
        return self._env

    def start(self) -> simpy.events.Process | None:
        if self._started:
            return None
        self._started = True
        return self._env.process(self._run_loop())

    def now(self) -> datetime:
        return self._start_dt + timedelta(seconds=float(self._env.now))

    # ----------------------------
    # Public API
    # ----------------------------
    def dispatch(
        self,
        *,
        name: str,
        event_type: str,
        event_source: str,
        data: Mapping[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> Event:
        if event_type not in ALLOWED_EVENT_TYPES:
            raise ValueError(
                f"Unsupported event_type={event_type!r}. Allowed={sorted(ALLOWED_EVENT_TYPES)}"
            )

        self._last_number += 1
        event = Event(
            id=self._ids.next_event_id(),
            name=name,
            type=event_type,
            source=event_source,
            timestamp=timestamp or self.now(),
            number=self._last_number,
            data=dict(data) if data is not None else None,
        )
        self._queue.put(event)
        _logger.debug(
            f"dispatched {name}",
            extra={"event_id": event.id, "event_type": event_type},
        )
        return event

    def register_listener(
        self,
        event_type: str,
        event_source: str,
        listener: Listener,
        *,
        ready: ReadyCheck | None = None,
    ) -> None:
        self._registrations.append(_Registration(event_type, event_source, listener, ready))

    def set_shared_state(self, name: str, data: Mapping[str, Any]) -> None:
        # visible from the next dispatched event on
        self._shared_states[name].append((self._last_number + 1, dict(data)))

        changed, self._state_changed = self._state_changed, self._env.event()
        changed.succeed()

    def get_shared_state(self, name: str, event: Event | None = None) -> dict[str, Any] | None:
        versions = self._shared_states.get(name)
        if not versions:
            return None
        if event is None:
            return versions[-1][1]

        resolved: dict[str, Any] | None = None
        for version, data in versions:
            if version > event.number:
                break
            resolved = data
        return resolved if resolved is not None else versions[0][1]

    def pending(self) -> int:
        return len(self._queue.items)

    # ----------------------------
    # Internal helpers
    # ----------------------------
    def _run_loop(self):
        while True:
            event: Event = yield self._queue.get()
            for reg in list(self._registrations):
                if reg.event_type != event.type or reg.event_source != event.source:
                    continue

                while reg.ready is not None and not reg.ready(event):
                    yield self._state_changed

                result = reg.listener(event)
                if inspect.isgenerator(result):
                    yield from result
