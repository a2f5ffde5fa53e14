from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from analytics_edge.core.constants import ConsequenceTypes, EventDataKeys
from analytics_edge.core.logging import get_logger
from analytics_edge.features.events.schema import Event
from analytics_edge.features.hits.schema import TrackRequest

_logger = get_logger(__name__)


def track_request_from_event(event: Event) -> TrackRequest | None:
    """
    Generic track request -> TrackRequest. None if the event carries no data.
    """
    if event.data is None:
        _drop(event, "event contained no data")
        return None
    return _track_request(event, event.data)


def track_request_from_consequence(event: Event) -> TrackRequest | None:
    """
    Rules-engine response -> TrackRequest, only for a well-formed analytics consequence:
    a map with type == "an", a non-empty string id, and an optional detail map.
    """
    if event.data is None:
        _drop(event, "event contained no data")
        return None

    consequence = event.data.get(EventDataKeys.TRIGGERED_CONSEQUENCE)
    if not isinstance(consequence, Mapping):
        _drop(event, "missing consequence data")
        return None

    if consequence.get(EventDataKeys.TYPE) != ConsequenceTypes.TRACK:
        _drop(event, "consequence type is not analytics")
        return None

    consequence_id = consequence.get(EventDataKeys.ID)
    if not isinstance(consequence_id, str) or not consequence_id:
        _drop(event, "consequence id is missing")
        return None

    detail = consequence.get(EventDataKeys.DETAIL)
    return _track_request(event, detail if isinstance(detail, Mapping) else {})


def _track_request(event: Event, data: Mapping[str, Any]) -> TrackRequest:
    action = data.get(EventDataKeys.TRACK_ACTION)
    state = data.get(EventDataKeys.TRACK_STATE)
    internal = data.get(EventDataKeys.TRACK_INTERNAL)

    return TrackRequest(
        source_event_id=event.id,
        source_timestamp=event.timestamp,
        action_name=action if isinstance(action, str) else None,
        state_name=state if isinstance(state, str) else None,
        is_internal_action=internal if isinstance(internal, bool) else False,
        context_data=_string_map(event, data.get(EventDataKeys.CONTEXT_DATA)),
    )


def _string_map(event: Event, raw: Any) -> dict[str, str]:
    # all-or-nothing: one non-string entry voids the whole map
    if not isinstance(raw, Mapping):
        return {}
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in raw.items()):
        _logger.debug(
            "ignoring context data with non-string entries",
            extra={"event_id": event.id, "feature": "track", "reason": "malformed"},
        )
        return {}
    return dict(raw)


def _drop(event: Event, reason: str) -> None:
    _logger.debug(
        f"ignoring event: {reason}",
        extra={"event_id": event.id, "event_type": event.type, "feature": "track", "reason": reason},
    )
