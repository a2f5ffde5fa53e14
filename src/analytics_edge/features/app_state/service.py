from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any

import simpy

from analytics_edge.core.logging import get_logger
from analytics_edge.core.types import AppState, AppStateLookup

_logger = get_logger(__name__)


@dataclass(slots=True)
class ApplicationStateOwner:
    """
    The only process allowed to read the host application state.

    Lookups are queued on a store and answered one at a time after
    `latency_s`, the way a main-thread hop would be.
    """

    env: simpy.Environment
    provider: Callable[[], AppState | None]
    latency_s: float = 0.0

    _requests: simpy.Store = field(init=False, repr=False)
    _started: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self._requests = simpy.Store(self.env)

    def start(self) -> simpy.events.Process | None:
        if self._started:
            return None
        self._started = True
        return self.env.process(self._serve_loop())

    def request(self) -> simpy.events.Event:
        reply = self.env.event()
        self._requests.put(reply)
        return reply

    def lookup(self, timeout_s: float) -> Generator[simpy.events.Event, Any, AppStateLookup]:
        """
        Bounded wait for the owner's answer. Use as `lookup = yield from owner.lookup(t)`.
        """
        reply = self.request()
        deadline = self.env.timeout(timeout_s)
        done = yield reply | deadline

        if reply not in done:
            _logger.debug(
                f"application state lookup timed out after {timeout_s}s",
                extra={"feature": "app_state", "reason": "timeout"},
            )
            return AppStateLookup.unknown()

        state = done[reply]
        if state is None:
            return AppStateLookup.unknown()
        return AppStateLookup(found=True, state=state)

    def _serve_loop(self):
        while True:
            reply: simpy.events.Event = yield self._requests.get()
            if self.latency_s > 0:
                yield self.env.timeout(self.latency_s)
            # a late answer lands on a request nobody waits for anymore
            reply.succeed(self.provider())


def fixed_state_provider(state: str | AppState | None) -> Callable[[], AppState | None]:
    if state is None or state == "none":
        return lambda: None
    resolved = AppState(state)
    return lambda: resolved
