from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from analytics_edge.core.constants import ANALYTICS_XDM_EVENT_TYPE, XDMDataKeys
from analytics_edge.core.logging import get_logger
from analytics_edge.core.types import PrivacyStatus
from analytics_edge.features.hits.assembler import assemble
from analytics_edge.features.hits.builder import build_context_data, build_vars
from analytics_edge.features.hits.schema import AppContext, AssuranceSnapshot, LegacyHit, TrackRequest
from analytics_edge.features.identity.types import PersistedIdentity
from analytics_edge.features.privacy.service import PrivacyGate

_logger = get_logger(__name__)


class TrackEventProcessor:
    """
    Privacy gate -> validation -> field building -> assembly.
    Holds no state between calls.
    """

    def __init__(self, *, privacy: PrivacyGate | None = None) -> None:
        self.privacy = privacy or PrivacyGate()

    def admit(
        self, request: TrackRequest, config_snapshot: Mapping[str, Any] | None
    ) -> PrivacyStatus | None:
        """
        Returns the resolved privacy status, or None if the request must be dropped.
        """
        status = self.privacy.resolve(config_snapshot)
        if not self.privacy.should_process(status):
            _logger.debug(
                "dropping request (privacy is opted out)",
                extra={"event_id": request.source_event_id, "privacy": status.value},
            )
            return None

        if not request.has_content():
            _logger.debug(
                "dropping request: missing state, action or contextData",
                extra={"event_id": request.source_event_id, "reason": "empty"},
            )
            return None

        return status

    def handle(
        self,
        request: TrackRequest,
        config_snapshot: Mapping[str, Any] | None,
        identity: PersistedIdentity,
        assurance: AssuranceSnapshot,
        app: AppContext,
    ) -> LegacyHit | None:
        status = self.admit(request, config_snapshot)
        if status is None:
            return None

        hit_vars = build_vars(request, status, identity, app)
        context_data = build_context_data(request, status, assurance)
        return assemble(hit_vars, context_data)


def build_edge_event_data(hit: LegacyHit) -> dict[str, Any]:
    return {
        XDMDataKeys.XDM: {XDMDataKeys.EVENT_TYPE: ANALYTICS_XDM_EVENT_TYPE},
        XDMDataKeys.DATA: {
            XDMDataKeys.LEGACY: {XDMDataKeys.ANALYTICS: hit.as_analytics_payload()},
        },
    }
