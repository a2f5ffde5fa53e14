from __future__ import annotations

EXTENSION_NAME = "com.adobe.module.analytics"
FRIENDLY_NAME = "AnalyticsEdge"
EXTENSION_VERSION = "1.0.0"
DATASTORE_NAME = EXTENSION_NAME

APP_STATE_FOREGROUND = "foreground"
APP_STATE_BACKGROUND = "background"

ACTION_PREFIX = "AMACTION:"
INTERNAL_ACTION_PREFIX = "ADBINTERNAL:"
VAR_ESCAPE_PREFIX = "&&"
IGNORE_PAGE_NAME_VALUE = "lnk_o"
CHARSET = "UTF-8"
NO_DATA_HIT_VALUE = 1


class Assurance:
    SHARED_STATE_NAME = "com.adobe.assurance"
    SESSION_ID = "sessionid"


class Configuration:
    SHARED_STATE_NAME = "com.adobe.module.configuration"
    GLOBAL_CONFIG_PRIVACY = "global.privacy"


class RequestKeys:
    """
    Legacy wire-format field names.
    """

    VISITOR_ID = "vid"
    CHARSET = "ce"
    FORMATTED_TIMESTAMP = "t"
    STRING_TIMESTAMP = "ts"
    CONTEXT_DATA = "c"
    PAGE_NAME = "pageName"
    IGNORE_PAGE_NAME = "pe"
    CUSTOMER_PERSPECTIVE = "cp"
    ACTION_NAME = "pev2"
    ANALYTICS_ID = "aid"
    NO_DATA_HIT = "ndh"
    PRIVACY_MODE = "a.privacy.mode"


class EventDataKeys:
    TRACK_INTERNAL = "trackinternal"
    TRACK_ACTION = "action"
    TRACK_STATE = "state"
    CONTEXT_DATA = "contextdata"

    TRIGGERED_CONSEQUENCE = "triggeredconsequence"
    ID = "id"
    DETAIL = "detail"
    TYPE = "type"


class ConsequenceTypes:
    TRACK = "an"


class ContextDataKeys:
    ACTION_KEY = "a.action"
    INTERNAL_ACTION_KEY = "a.internalaction"
    EVENT_IDENTIFIER_KEY = "a.DebugEventIdentifier"


class XDMDataKeys:
    LEGACY = "_legacy"
    ANALYTICS = "analytics"
    EVENT_TYPE = "eventType"
    DATA = "data"
    XDM = "xdm"


ANALYTICS_XDM_EVENT_TYPE = "legacy.analytics"
ANALYTICS_XDM_EVENT_NAME = "Analytics Edge Request"


class DataStoreKeys:
    AID = "aid"
    IGNORE_AID = "ignoreaid"
    VID = "vid"
    DATA_MIGRATED = "data.migrated"
