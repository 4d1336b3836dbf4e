"""In-process map store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from mindweave.exceptions import MapNotFoundError
from mindweave.model.types import MindMapState
from mindweave.persistence.base import MapStore
from mindweave.persistence.document import deserialize, serialize
from mindweave.persistence.types import MapSummary


@dataclass
class _Entry:
    owner: str
    data: bytes
    name: str
    node_count: int
    created_at: datetime
    updated_at: datetime


class InMemoryMapStore(MapStore):
    """Keeps serialized maps in a dict.

    Maps round-trip through the serializer so a loaded state never shares
    objects with the saved one.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._entries: dict[str, _Entry] = {}

    def save(self, state: MindMapState, *, owner: str) -> str:
        map_id = state.id or self.new_id()
        document = serialize(state.evolve(id=map_id))
        now = self._clock()
        previous = self._entries.get(map_id)
        self._entries[map_id] = _Entry(
            owner=owner,
            data=self._serializer.dumps(document),
            name=state.name,
            node_count=len(state.nodes),
            created_at=previous.created_at if previous else now,
            updated_at=now,
        )
        return map_id

    def load(self, map_id: str) -> MindMapState:
        entry = self._entries.get(map_id)
        if entry is None:
            raise MapNotFoundError(map_id)
        return deserialize(self._serializer.loads(entry.data))

    def list_maps(self, owner: str | None = None, *, limit: int = 100) -> list[MapSummary]:
        summaries = [
            MapSummary(
                id=map_id,
                name=entry.name,
                owner=entry.owner,
                node_count=entry.node_count,
                created_at=entry.created_at,
                updated_at=entry.updated_at,
            )
            for map_id, entry in self._entries.items()
            if owner is None or entry.owner == owner
        ]
        summaries.sort(key=lambda s: s.updated_at, reverse=True)
        return summaries[:limit]

    def delete(self, map_id: str) -> None:
        if self._entries.pop(map_id, None) is None:
            raise MapNotFoundError(map_id)
