"""Record types returned by map stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def _utcnow() -> datetime:
    """UTC-aware datetime (avoids deprecated utcnow)."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MapSummary:
    """Listing entry for a saved map.

    Attributes:
        id: Map id within the store.
        name: Map name (the root's content).
        owner: Owner the map was saved for.
        node_count: Number of nodes at last save.
        created_at: First save.
        updated_at: Most recent save.
    """

    id: str
    name: str
    owner: str
    node_count: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "node_count": self.node_count,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
