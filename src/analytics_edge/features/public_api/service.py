from __future__ import annotations

from enum import Enum

from analytics_edge.core.logging import get_logger

_logger = get_logger(__name__)


class AnalyticsError(str, Enum):
    NONE = "none"
    UNEXPECTED = "unexpected"


def _unsupported(api: str) -> None:
    _logger.debug(f"{api} - is not currently supported with Edge", extra={"feature": "public_api"})


def clear_queue() -> None:
    _unsupported("clear_queue")


def get_queue_size() -> tuple[int, AnalyticsError]:
    _unsupported("get_queue_size")
    return 0, AnalyticsError.UNEXPECTED


def send_queued_hits() -> None:
    _unsupported("send_queued_hits")


def get_tracking_identifier() -> tuple[str | None, AnalyticsError]:
    _unsupported("get_tracking_identifier")
    return None, AnalyticsError.UNEXPECTED


def get_visitor_identifier() -> tuple[str | None, AnalyticsError]:
    _unsupported("get_visitor_identifier")
    return None, AnalyticsError.UNEXPECTED


def set_visitor_identifier(visitor_identifier: str) -> None:
    _unsupported("set_visitor_identifier")
