"""Persistence collaborator: document codec and map stores.

The editor core never performs I/O. This package turns states into plain
documents and back, and provides stores that own the storage medium.
"""

from mindweave.persistence.base import MapStore
from mindweave.persistence.document import deserialize, serialize
from mindweave.persistence.memory import InMemoryMapStore
from mindweave.persistence.serializers import JsonSerializer, Serializer
from mindweave.persistence.sqlite import SqliteMapStore
from mindweave.persistence.types import MapSummary

__all__ = [
    "InMemoryMapStore",
    "JsonSerializer",
    "MapStore",
    "MapSummary",
    "Serializer",
    "SqliteMapStore",
    "deserialize",
    "serialize",
]
