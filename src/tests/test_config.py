from pathlib import Path

import pytest

from analytics_edge.app.runner import load_events
from analytics_edge.core.config import load_config, parse_config


def _minimal(**extra):
    data = {"datastore": {"duckdb_path": ":memory:"}, "logging": {"level": "info"}}
    data.update(extra)
    return data


def test_defaults():
    cfg = parse_config(_minimal())

    assert cfg.datastore.collection == "com.adobe.module.analytics"
    assert cfg.datastore.legacy_collection == "standard.defaults"
    assert cfg.datastore.clean_slate is False
    assert cfg.logging.level == "INFO"
    assert cfg.application.state == "active"
    assert cfg.application.timezone_offset_minutes is None
    assert cfg.app_state.timeout_s == 1.0


def test_missing_sections_raise():
    with pytest.raises(ValueError):
        parse_config({"logging": {}})
    with pytest.raises(ValueError):
        parse_config({"datastore": {}, "logging": {}})


def test_invalid_values_raise():
    with pytest.raises(ValueError):
        parse_config(_minimal(application={"state": "sleeping"}))
    with pytest.raises(ValueError):
        parse_config(_minimal(app_state={"timeout_s": 0}))


def test_shipped_config_parses():
    cfg = load_config(Path(__file__).parents[2] / "config" / "extension.yaml")

    assert cfg.application.name == "SampleApp"


def test_events_file_validation(tmp_path):
    path = tmp_path / "events.yaml"
    path.write_text("- kind: track\n- kind: teleport\n")

    with pytest.raises(ValueError):
        load_events(path)

    path.write_text("kind: track\n")
    with pytest.raises(ValueError):
        load_events(path)
