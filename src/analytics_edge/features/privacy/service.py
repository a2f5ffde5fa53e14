from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from analytics_edge.core.constants import Configuration
from analytics_edge.core.types import PrivacyStatus


class PrivacyGate:
    """
    Resolves privacy from the configuration snapshot that accompanies each event.
    Stateless; the snapshot is never mutated.
    """

    def resolve(self, config_snapshot: Mapping[str, Any] | None) -> PrivacyStatus:
        if not config_snapshot:
            return PrivacyStatus.UNKNOWN
        return PrivacyStatus.parse(config_snapshot.get(Configuration.GLOBAL_CONFIG_PRIVACY))

    def should_process(self, state: PrivacyStatus) -> bool:
        return state is not PrivacyStatus.OPTED_OUT

    def is_opt_out_transition(self, config_event_data: Mapping[str, Any] | None) -> bool:
        """
        True when a configuration-change payload reports opted-out.
        A payload without a privacy string is not a transition.
        """
        if not config_event_data:
            return False
        raw = config_event_data.get(Configuration.GLOBAL_CONFIG_PRIVACY)
        if not isinstance(raw, str):
            return False
        return PrivacyStatus.parse(raw) is PrivacyStatus.OPTED_OUT
