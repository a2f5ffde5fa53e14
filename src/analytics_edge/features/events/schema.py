from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


class EventType:
    GENERIC_TRACK = "com.adobe.eventType.generic.track"
    RULES_ENGINE = "com.adobe.eventType.rulesEngine"
    CONFIGURATION = "com.adobe.eventType.configuration"
    EDGE = "com.adobe.eventType.edge"
    HUB = "com.adobe.eventType.hub"


class EventSource:
    REQUEST_CONTENT = "com.adobe.eventSource.requestContent"
    RESPONSE_CONTENT = "com.adobe.eventSource.responseContent"
    SHARED_STATE = "com.adobe.eventSource.sharedState"


ALLOWED_EVENT_TYPES: set[str] = {
    EventType.GENERIC_TRACK,
    EventType.RULES_ENGINE,
    EventType.CONFIGURATION,
    EventType.EDGE,
    EventType.HUB,
}


@dataclass(frozen=True, slots=True)
class Event:
    id: str
    name: str
    type: str
    source: str
    timestamp: datetime

    # position in the hub's dispatch order; shared states are versioned against it
    number: int

    data: Mapping[str, Any] | None = None
