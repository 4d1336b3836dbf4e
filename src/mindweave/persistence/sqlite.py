"""SQLite-based map store."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any

from mindweave.exceptions import MapNotFoundError, StoreError
from mindweave.model.types import MindMapState
from mindweave.persistence._schema import ensure_schema
from mindweave.persistence.base import MapStore
from mindweave.persistence.document import deserialize, serialize
from mindweave.persistence.types import MapSummary

logger = logging.getLogger(__name__)

# Explicit column list for SELECT queries
_SUMMARY_COLS = "id, name, owner, node_count, created_at, updated_at"


class SqliteMapStore(MapStore):
    """SQLite-based map persistence.

    Best for: local use and single-user deployments.

    Args:
        path: Path to SQLite database file (``":memory:"`` for a throwaway DB).
        serializer: Document serializer (default: JSON).
        clock: Returns the timestamp recorded on save.

    Example::

        with SqliteMapStore("./maps.db") as store:
            map_id = store.save(editor.state, owner="alice")
            editor.dispatch(SetMapId(id=map_id))
            recent = store.list_maps("alice")
    """

    def __init__(self, path: str, **kwargs: Any):
        super().__init__(**kwargs)
        self._path = path
        self._conn: sqlite3.Connection | None = None

    def _db(self) -> sqlite3.Connection:
        """Lazy-initialize on first use."""
        if self._conn is None:
            try:
                conn = sqlite3.connect(self._path)
                ensure_schema(conn)
            except (sqlite3.Error, RuntimeError) as e:
                raise StoreError(f"Cannot open map store at '{self._path}': {e}") from e
            self._conn = conn
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def save(self, state: MindMapState, *, owner: str) -> str:
        map_id = state.id or self.new_id()
        data = self._serializer.dumps(serialize(state.evolve(id=map_id)))
        now = self._clock().isoformat()
        db = self._db()
        try:
            with db:
                db.execute(
                    """
                    INSERT INTO maps (id, owner, name, node_count, document, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        owner = excluded.owner,
                        name = excluded.name,
                        node_count = excluded.node_count,
                        document = excluded.document,
                        updated_at = excluded.updated_at
                    """,
                    (map_id, owner, state.name, len(state.nodes), data, now, now),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to save map '{map_id}': {e}") from e
        logger.debug("Saved map %s (%d nodes) for %s", map_id, len(state.nodes), owner)
        return map_id

    def load(self, map_id: str) -> MindMapState:
        try:
            row = self._db().execute("SELECT document FROM maps WHERE id = ?", (map_id,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to load map '{map_id}': {e}") from e
        if row is None:
            raise MapNotFoundError(map_id)
        return deserialize(self._serializer.loads(row[0]))

    def list_maps(self, owner: str | None = None, *, limit: int = 100) -> list[MapSummary]:
        query = f"SELECT {_SUMMARY_COLS} FROM maps"
        params: list[Any] = []
        if owner is not None:
            query += " WHERE owner = ?"
            params.append(owner)
        query += " ORDER BY updated_at DESC LIMIT ?"
        params.append(limit)
        try:
            rows = self._db().execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list maps: {e}") from e
        return [self._row_to_summary(row) for row in rows]

    def delete(self, map_id: str) -> None:
        db = self._db()
        try:
            with db:
                cursor = db.execute("DELETE FROM maps WHERE id = ?", (map_id,))
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete map '{map_id}': {e}") from e
        if cursor.rowcount == 0:
            raise MapNotFoundError(map_id)

    def _row_to_summary(self, row: tuple[Any, ...]) -> MapSummary:
        return MapSummary(
            id=row[0],
            name=row[1],
            owner=row[2],
            node_count=row[3],
            created_at=datetime.fromisoformat(row[4]),
            updated_at=datetime.fromisoformat(row[5]),
        )
