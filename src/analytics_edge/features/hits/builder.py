from __future__ import annotations

from analytics_edge.core.constants import (
    ACTION_PREFIX,
    APP_STATE_BACKGROUND,
    APP_STATE_FOREGROUND,
    CHARSET,
    IGNORE_PAGE_NAME_VALUE,
    INTERNAL_ACTION_PREFIX,
    ContextDataKeys,
    RequestKeys,
)
from analytics_edge.core.types import AppState, PrivacyStatus
from analytics_edge.features.identity.types import PersistedIdentity

from .schema import AppContext, AssuranceSnapshot, TrackRequest


def build_vars(
    request: TrackRequest,
    privacy: PrivacyStatus,
    identity: PersistedIdentity,
    app: AppContext,
) -> dict[str, str]:
    """
    Request variables (pe, pev2, pageName, aid, vid, ce, t, ts, cp).

    pe/pev2 are present whenever there is an action, regardless of state.
    pageName is the state when given, else the app identifier so the hit is not discarded.
    """
    ret: dict[str, str] = {}

    if request.action_name:
        ret[RequestKeys.IGNORE_PAGE_NAME] = IGNORE_PAGE_NAME_VALUE
        ret[RequestKeys.ACTION_NAME] = action_prefix(request.is_internal_action) + request.action_name

    ret[RequestKeys.PAGE_NAME] = app.application_identifier()
    if request.state_name:
        ret[RequestKeys.PAGE_NAME] = request.state_name

    if identity.analytics_id:
        ret[RequestKeys.ANALYTICS_ID] = identity.analytics_id
    if identity.visitor_id:
        ret[RequestKeys.VISITOR_ID] = identity.visitor_id

    ret[RequestKeys.CHARSET] = CHARSET
    ret[RequestKeys.FORMATTED_TIMESTAMP] = gmt_offset_timestamp(app.timezone_offset_minutes)
    ret[RequestKeys.STRING_TIMESTAMP] = str(int(request.source_timestamp.timestamp()))

    if app.app_state.found:
        ret[RequestKeys.CUSTOMER_PERSPECTIVE] = (
            APP_STATE_BACKGROUND
            if app.app_state.state is AppState.BACKGROUND
            else APP_STATE_FOREGROUND
        )

    return ret


def build_context_data(
    request: TrackRequest,
    privacy: PrivacyStatus,
    assurance: AssuranceSnapshot,
) -> dict[str, str]:
    ret: dict[str, str] = dict(request.context_data)

    if request.action_name:
        ret[action_key(request.is_internal_action)] = request.action_name

    if privacy is PrivacyStatus.UNKNOWN:
        ret[RequestKeys.PRIVACY_MODE] = PrivacyStatus.UNKNOWN.value

    if assurance.session_active:
        ret[ContextDataKeys.EVENT_IDENTIFIER_KEY] = request.source_event_id

    return ret


def action_prefix(is_internal_action: bool) -> str:
    return INTERNAL_ACTION_PREFIX if is_internal_action else ACTION_PREFIX


def action_key(is_internal_action: bool) -> str:
    return ContextDataKeys.INTERNAL_ACTION_KEY if is_internal_action else ContextDataKeys.ACTION_KEY


def gmt_offset_timestamp(offset_minutes: int) -> str:
    # backend reads only the trailing offset, sign inverted (minutes west of GMT)
    return f"00/00/0000 00:00:00 0 {-offset_minutes}"
