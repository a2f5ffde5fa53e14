from __future__ import annotations

from typing import Any, Protocol

from .duckdb_adapter import DuckDBAdapter


class KeyValueStore(Protocol):
    """
    Minimal surface area the identity feature needs.
    """

    def get(self, key: str, default: Any | None = None) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class NamedCollectionDataStore:
    """
    One named collection inside the shared DuckDB key/value table.
    Several collections (the extension's own, the legacy app defaults) share one adapter.
    """

    def __init__(self, *, adapter: DuckDBAdapter, name: str) -> None:
        self.adapter = adapter
        self.name = name

    def get(self, key: str, default: Any | None = None) -> Any | None:
        value = self.adapter.read(self.name, key)
        return default if value is None else value

    def get_string(self, key: str) -> str | None:
        value = self.get(key)
        return value if isinstance(value, str) else None

    def get_bool(self, key: str) -> bool | None:
        value = self.get(key)
        return value if isinstance(value, bool) else None

    def contains(self, key: str) -> bool:
        return self.adapter.read(self.name, key) is not None

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self.remove(key)
            return
        self.adapter.write(self.name, key, value)

    def remove(self, key: str) -> None:
        self.adapter.delete(self.name, key)

    def size(self) -> int:
        return self.adapter.count(self.name)
