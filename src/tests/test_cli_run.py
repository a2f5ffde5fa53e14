import json

import yaml

from analytics_edge.app.cli import main
from analytics_edge.app.runner import run


def _write_config(tmp_path, **overrides):
    cfg = {
        "datastore": {"duckdb_path": str(tmp_path / "edge.duckdb"), "clean_slate": True},
        "logging": {"level": "WARNING"},
        "application": {"name": "CliApp", "version": "2.0", "build": "1", "timezone_offset_minutes": 0},
    }
    cfg.update(overrides)
    path = tmp_path / "extension.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return path


def _write_events(tmp_path, events):
    path = tmp_path / "events.yaml"
    path.write_text(yaml.safe_dump(events))
    return path


EVENTS = [
    {"kind": "configuration", "data": {"global.privacy": "optedin"}},
    {"kind": "track", "at_s": 1.0, "data": {"state": "Home", "contextdata": {"&&events": "event1"}}},
    {"kind": "consequence", "at_s": 2.0, "consequence": {"id": "r1", "type": "an", "detail": {"action": "fired"}}},
    {"kind": "configuration", "at_s": 3.0, "data": {"global.privacy": "optedout"}},
    {"kind": "track", "at_s": 4.0, "data": {"action": "dropped"}},
]


def test_run_replays_events_into_hits(tmp_path):
    cfg_path = _write_config(tmp_path)
    events_path = _write_events(tmp_path, EVENTS)

    result = run(str(cfg_path), str(events_path))

    assert result.migration.skipped is False
    assert len(result.hits) == 2

    first = result.hits[0]["data"]["_legacy"]["analytics"]
    assert first["pageName"] == "Home"
    assert first["events"] == "event1"

    second = result.hits[1]["data"]["_legacy"]["analytics"]
    assert second["pev2"] == "AMACTION:fired"
    assert second["pageName"] == "CliApp 2.0 (1)"


def test_run_without_events_only_boots(tmp_path):
    result = run(str(_write_config(tmp_path)))

    assert result.hits == []


def test_cli_prints_one_json_line_per_hit(tmp_path, capsys):
    cfg_path = _write_config(tmp_path)
    events_path = _write_events(tmp_path, EVENTS[:2])

    code = main(["run", "--config", str(cfg_path), "--events", str(events_path)])

    assert code == 0
    lines = [line for line in capsys.readouterr().out.splitlines() if '"xdm"' in line]
    assert len(lines) == 1
    assert json.loads(lines[0])["xdm"] == {"eventType": "legacy.analytics"}
