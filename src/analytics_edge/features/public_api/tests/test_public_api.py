from __future__ import annotations

from analytics_edge.features.public_api import service as api
from analytics_edge.features.public_api.service import AnalyticsError


def test_queue_apis_are_unsupported():
    assert api.clear_queue() is None
    assert api.send_queued_hits() is None
    assert api.get_queue_size() == (0, AnalyticsError.UNEXPECTED)


def test_identifier_apis_are_unsupported():
    assert api.get_tracking_identifier() == (None, AnalyticsError.UNEXPECTED)
    assert api.get_visitor_identifier() == (None, AnalyticsError.UNEXPECTED)
    assert api.set_visitor_identifier("vid") is None
    # setting does not make it readable
    assert api.get_visitor_identifier() == (None, AnalyticsError.UNEXPECTED)
