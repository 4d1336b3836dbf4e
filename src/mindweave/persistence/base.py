"""Map store base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable

from mindweave.model.types import MindMapState, generate_id
from mindweave.persistence.serializers import JsonSerializer, Serializer
from mindweave.persistence.types import MapSummary, _utcnow


class MapStore(ABC):
    """Base class for saved-map storage.

    A store owns the storage medium and map identity. It never touches an
    editor's in-memory state: ``save`` returns the id it assigned, and the
    caller decides whether to dispatch ``SetMapId``. Every failure surfaces
    as ``StoreError`` (or ``MapNotFoundError``) from the call that failed.

    Args:
        serializer: Document serializer (default: JSON).
        clock: Returns the timestamp recorded on save.
    """

    def __init__(
        self,
        *,
        serializer: Serializer | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._serializer = serializer or JsonSerializer()
        self._clock = clock or _utcnow

    def new_id(self) -> str:
        """Id for a map saved for the first time."""
        return generate_id("map")

    @abstractmethod
    def save(self, state: MindMapState, *, owner: str) -> str:
        """Insert or update a map and return its id.

        A state without an id is stored under a fresh id.
        """
        ...

    @abstractmethod
    def load(self, map_id: str) -> MindMapState:
        """Load a map. Raises MapNotFoundError if missing."""
        ...

    @abstractmethod
    def list_maps(self, owner: str | None = None, *, limit: int = 100) -> list[MapSummary]:
        """List maps, most recently updated first, optionally for one owner."""
        ...

    @abstractmethod
    def delete(self, map_id: str) -> None:
        """Delete a map. Raises MapNotFoundError if missing."""
        ...

    def close(self) -> None:  # noqa: B027
        """Clean up resources (close connections, etc.)."""

    def __enter__(self) -> MapStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
