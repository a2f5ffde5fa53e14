from __future__ import annotations

DATASTORE_TABLE_NAME = "datastore"

DATASTORE_DDL = f"""
CREATE TABLE IF NOT EXISTS {DATASTORE_TABLE_NAME} (
    collection TEXT NOT NULL,
    key TEXT NOT NULL,

    value_json TEXT NOT NULL,

    PRIMARY KEY (collection, key)
);
"""


def create_schema(conn) -> None:
    """
    Create the key/value table. No migrations. Safe to call on every start.
    """
    conn.execute(DATASTORE_DDL)
