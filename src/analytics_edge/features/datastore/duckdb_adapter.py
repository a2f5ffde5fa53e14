from __future__ import annotations

import json
import os
from typing import Any

import duckdb

from .schema import DATASTORE_TABLE_NAME, create_schema

IN_MEMORY = ":memory:"


class DataStoreError(Exception):
    """Raised when the backing store cannot complete a read/write/delete."""


class DuckDBAdapter:
    """
    DuckDB key/value adapter. Owns the connection and schema.
    Values are stored JSON-encoded so bools and numbers survive a round trip.
    """

    def __init__(self, path: str, *, clean_slate: bool = False) -> None:
        self.path = path
        self.clean_slate = clean_slate
        self._conn: duckdb.DuckDBPyConnection | None = None

    def open(self) -> None:
        if self.path != IN_MEMORY:
            if self.clean_slate and os.path.exists(self.path):
                os.remove(self.path)

            # Ensure parent dir exists
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)

        self._conn = duckdb.connect(self.path)
        create_schema(self._conn)

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise RuntimeError("DuckDBAdapter not opened. Call open() first.")
        return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def read(self, collection: str, key: str) -> Any | None:
        try:
            row = self.conn.execute(
                f"SELECT value_json FROM {DATASTORE_TABLE_NAME} WHERE collection = ? AND key = ?",
                [collection, key],
            ).fetchone()
        except duckdb.Error as exc:
            raise DataStoreError(f"read {collection}/{key} failed: {exc}") from exc
        if row is None:
            return None
        return json.loads(row[0])

    def write(self, collection: str, key: str, value: Any) -> None:
        value_json = json.dumps(value, separators=(",", ":"))
        try:
            self.conn.execute(
                f"INSERT OR REPLACE INTO {DATASTORE_TABLE_NAME} (collection, key, value_json) "
                "VALUES (?, ?, ?)",
                [collection, key, value_json],
            )
        except duckdb.Error as exc:
            raise DataStoreError(f"write {collection}/{key} failed: {exc}") from exc

    def delete(self, collection: str, key: str) -> None:
        try:
            self.conn.execute(
                f"DELETE FROM {DATASTORE_TABLE_NAME} WHERE collection = ? AND key = ?",
                [collection, key],
            )
        except duckdb.Error as exc:
            raise DataStoreError(f"delete {collection}/{key} failed: {exc}") from exc

    def count(self, collection: str) -> int:
        """
        Convenience method for sanity checks/tests.
        """
        res = self.conn.execute(
            f"SELECT COUNT(*) FROM {DATASTORE_TABLE_NAME} WHERE collection = ?",
            [collection],
        ).fetchone()
        return int(res[0]) if res else 0
