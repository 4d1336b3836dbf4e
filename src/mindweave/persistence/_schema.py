"""Schema setup for SQLite map stores."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger("mindweave.persistence")

SCHEMA_VERSION = 1

_CREATE_MAPS = """
CREATE TABLE IF NOT EXISTS maps (
    id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    name TEXT NOT NULL,
    node_count INTEGER NOT NULL DEFAULT 0,
    document BLOB NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_maps_owner_updated ON maps(owner, updated_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_maps_updated ON maps(updated_at DESC)",
)


def detect_schema_version(conn: Any) -> int:
    """Detect the schema version of an existing database.

    Returns:
        0: empty database (no tables)
        N: version recorded in _schema_version
    """
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
    if "_schema_version" not in tables:
        return 0
    row = conn.execute("SELECT version FROM _schema_version").fetchone()
    return row[0] if row else 0


def ensure_schema(conn: Any) -> None:
    """Create the schema on an empty database; refuse unknown newer versions."""
    version = detect_schema_version(conn)
    if version == SCHEMA_VERSION:
        return
    if version > SCHEMA_VERSION:
        raise RuntimeError(
            f"Map database has schema v{version}, but this mindweave only understands v{SCHEMA_VERSION}"
        )

    logger.info("Creating map store schema v%d", SCHEMA_VERSION)
    conn.execute(_CREATE_MAPS)
    for statement in _CREATE_INDEXES:
        conn.execute(statement)
    conn.execute("CREATE TABLE IF NOT EXISTS _schema_version (version INTEGER NOT NULL)")
    conn.execute("DELETE FROM _schema_version")
    conn.execute("INSERT INTO _schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
    conn.commit()
