from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from analytics_edge.core.constants import DATASTORE_NAME

# "none": the host reports no application state
APP_STATES = {"active", "inactive", "background", "none"}


@dataclass(frozen=True)
class DataStoreConfig:
    duckdb_path: str
    clean_slate: bool = False
    collection: str = DATASTORE_NAME
    # v4/v5 SDKs wrote into the app-wide defaults, not a named collection
    legacy_collection: str = "standard.defaults"


@dataclass(frozen=True)
class ApplicationConfig:
    name: str = ""
    version: str = ""
    build: str = ""
    state: str = "active"
    state_latency_s: float = 0.0
    timezone_offset_minutes: int | None = None


@dataclass(frozen=True)
class AppStateConfig:
    timeout_s: float = 1.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ExtensionConfig:
    datastore: DataStoreConfig
    logging: LoggingConfig
    application: ApplicationConfig
    app_state: AppStateConfig
    raw: dict[str, Any]  # original parsed YAML (for debugging)


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    data = yaml.safe_load(p.read_text())
    if not isinstance(data, dict):
        raise ValueError("Config YAML must parse to a dict at the top level.")
    return data


def parse_config(data: dict[str, Any]) -> ExtensionConfig:
    for key in ["datastore", "logging"]:
        if key not in data:
            raise ValueError(f"Missing required top-level config section: '{key}'")

    store = data.get("datastore") or {}
    logging_cfg = data.get("logging") or {}
    app = data.get("application") or {}
    app_state = data.get("app_state") or {}

    if "duckdb_path" not in store:
        raise ValueError("datastore.duckdb_path is required (use ':memory:' for a throwaway store).")

    store_cfg = DataStoreConfig(
        duckdb_path=str(store["duckdb_path"]),
        clean_slate=bool(store.get("clean_slate", False)),
        collection=str(store.get("collection", DATASTORE_NAME)),
        legacy_collection=str(store.get("legacy_collection", "standard.defaults")),
    )

    tz_offset = app.get("timezone_offset_minutes")
    app_cfg = ApplicationConfig(
        name=str(app.get("name", "")),
        version=str(app.get("version", "")),
        build=str(app.get("build", "")),
        state=str(app.get("state", "active")).lower(),
        state_latency_s=float(app.get("state_latency_s", 0.0)),
        timezone_offset_minutes=None if tz_offset is None else int(tz_offset),
    )

    if app_cfg.state not in APP_STATES:
        raise ValueError(f"application.state must be one of {sorted(APP_STATES)}, got {app_cfg.state!r}")

    timeout_s = float(app_state.get("timeout_s", 1.0))
    if timeout_s <= 0:
        raise ValueError(f"app_state.timeout_s must be positive, got {timeout_s}")

    log_cfg = LoggingConfig(level=str(logging_cfg.get("level", "INFO")).upper())

    return ExtensionConfig(
        datastore=store_cfg,
        logging=log_cfg,
        application=app_cfg,
        app_state=AppStateConfig(timeout_s=timeout_s),
        raw=data,
    )


def load_config(path: str | Path) -> ExtensionConfig:
    data = load_yaml(path)
    return parse_config(data)
