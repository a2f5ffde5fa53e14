from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from analytics_edge.core.constants import NO_DATA_HIT_VALUE, RequestKeys
from analytics_edge.core.types import AppStateLookup


@dataclass(frozen=True, slots=True)
class TrackRequest:
    """
    Normalized track intent, whichever listener it came from.
    """

    source_event_id: str
    source_timestamp: datetime

    action_name: str | None = None
    state_name: str | None = None
    is_internal_action: bool = False
    context_data: Mapping[str, str] = field(default_factory=dict)

    def has_content(self) -> bool:
        return bool(self.action_name) or bool(self.state_name) or bool(self.context_data)


@dataclass(frozen=True, slots=True)
class AssuranceSnapshot:
    debug_session_id: str | None = None

    @property
    def session_active(self) -> bool:
        return bool(self.debug_session_id)


@dataclass(frozen=True, slots=True)
class AppContext:
    """
    Host application facts needed to build a hit.
    app_state is already resolved; building a hit never waits on anything.
    """

    name: str = ""
    version: str = ""
    build: str = ""
    # minutes east of GMT, like datetime.utcoffset()
    timezone_offset_minutes: int = 0
    app_state: AppStateLookup = AppStateLookup.unknown()

    def application_identifier(self) -> str:
        # drop the "()" wrapper and doubled spaces left by empty parts
        ident = f"{self.name} {self.version} ({self.build})"
        return ident.replace("  ", " ").replace("()", "").strip()


def local_timezone_offset_minutes(now: datetime | None = None) -> int:
    now = now or datetime.now().astimezone()
    offset = now.utcoffset()
    if offset is None:
        return 0
    return int(offset.total_seconds() / 60)


@dataclass(frozen=True, slots=True)
class LegacyHit:
    """
    Assembled hit. fields holds every top-level wire field (ndh included),
    context_data the nested "c" map.
    """

    fields: Mapping[str, Any]
    context_data: Mapping[str, str]

    @property
    def no_data_hit(self) -> Any:
        return self.fields.get(RequestKeys.NO_DATA_HIT, NO_DATA_HIT_VALUE)

    def as_analytics_payload(self) -> dict[str, Any]:
        payload = dict(self.fields)
        payload[RequestKeys.CONTEXT_DATA] = dict(self.context_data)
        return payload
