from __future__ import annotations

from analytics_edge.core.types import PrivacyStatus
from analytics_edge.features.privacy.service import PrivacyGate


def test_resolve_reads_global_privacy():
    gate = PrivacyGate()

    assert gate.resolve({"global.privacy": "optedin"}) is PrivacyStatus.OPTED_IN
    assert gate.resolve({"global.privacy": "optedout"}) is PrivacyStatus.OPTED_OUT
    assert gate.resolve({"global.privacy": "unknown"}) is PrivacyStatus.UNKNOWN


def test_missing_or_unparseable_is_unknown():
    gate = PrivacyGate()

    assert gate.resolve(None) is PrivacyStatus.UNKNOWN
    assert gate.resolve({}) is PrivacyStatus.UNKNOWN
    assert gate.resolve({"global.privacy": "OPTED_OUT"}) is PrivacyStatus.UNKNOWN
    assert gate.resolve({"global.privacy": 1}) is PrivacyStatus.UNKNOWN


def test_only_opted_out_blocks_processing():
    gate = PrivacyGate()

    assert gate.should_process(PrivacyStatus.OPTED_IN) is True
    assert gate.should_process(PrivacyStatus.UNKNOWN) is True
    assert gate.should_process(PrivacyStatus.OPTED_OUT) is False


def test_opt_out_transition_requires_privacy_string():
    gate = PrivacyGate()

    assert gate.is_opt_out_transition({"global.privacy": "optedout"}) is True
    assert gate.is_opt_out_transition({"global.privacy": "optedin"}) is False
    assert gate.is_opt_out_transition({"other": "value"}) is False
    assert gate.is_opt_out_transition(None) is False
