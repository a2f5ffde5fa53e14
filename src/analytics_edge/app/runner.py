from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from analytics_edge.core.config import load_config
from analytics_edge.core.constants import Configuration, EventDataKeys
from analytics_edge.features.events.schema import EventSource, EventType
from analytics_edge.features.events.service import EventHub
from analytics_edge.features.extension.service import BootstrapResult, bootstrap_extension
from analytics_edge.features.identity.types import MigrationResult

EVENT_KINDS = {"track", "consequence", "configuration", "shared_state"}


@dataclass(frozen=True)
class RunResult:
    migration: MigrationResult
    # outbound edge event payloads, in dispatch order
    hits: list[dict[str, Any]]


def load_events(path: str | Path) -> list[dict[str, Any]]:
    data = yaml.safe_load(Path(path).read_text()) or []
    if not isinstance(data, list):
        raise ValueError("Events YAML must parse to a list at the top level.")
    for i, item in enumerate(data):
        if not isinstance(item, dict) or item.get("kind") not in EVENT_KINDS:
            raise ValueError(f"events[{i}]: 'kind' must be one of {sorted(EVENT_KINDS)}")
    return data


def replay(boot: BootstrapResult, events: Sequence[Mapping[str, Any]]) -> None:
    """
    Feed inbound events into the hub at their `at_s` offsets, then drain.
    """
    env = boot.env

    def _feed():
        for item in sorted(events, key=lambda e: float(e.get("at_s", 0.0))):
            delay = float(item.get("at_s", 0.0)) - float(env.now)
            if delay > 0:
                yield env.timeout(delay)
            _apply(boot.hub, item)

    env.process(_feed())
    env.run()


def _apply(hub: EventHub, item: Mapping[str, Any]) -> None:
    kind = item["kind"]
    data = item.get("data") or {}

    if kind == "shared_state":
        hub.set_shared_state(str(item["name"]), data)
    elif kind == "configuration":
        hub.set_shared_state(Configuration.SHARED_STATE_NAME, data)
        hub.dispatch(
            name="Configuration Response",
            event_type=EventType.CONFIGURATION,
            event_source=EventSource.RESPONSE_CONTENT,
            data=data,
        )
    elif kind == "track":
        hub.dispatch(
            name="Analytics Track",
            event_type=EventType.GENERIC_TRACK,
            event_source=EventSource.REQUEST_CONTENT,
            data=item.get("data"),
        )
    elif kind == "consequence":
        hub.dispatch(
            name="Rules Consequence Event",
            event_type=EventType.RULES_ENGINE,
            event_source=EventSource.RESPONSE_CONTENT,
            data={EventDataKeys.TRIGGERED_CONSEQUENCE: item.get("consequence")},
        )


def run(config_path: str, events_path: str | None = None) -> RunResult:
    cfg = load_config(config_path)
    events = load_events(events_path) if events_path else []

    boot = bootstrap_extension(cfg)
    try:
        replay(boot, events)
    finally:
        boot.adapter.close()

    sent = getattr(boot.transport, "events", [])
    return RunResult(
        migration=boot.extension.migration,
        hits=[dict(e.data or {}) for e in sent],
    )
