"""Serializers for stored map documents."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from mindweave.exceptions import MapFormatError


class Serializer(ABC):
    """Base class for document serialization.

    Map stores use serializers to convert documents (see
    ``mindweave.persistence.document``) to bytes for storage and back.
    """

    @abstractmethod
    def dumps(self, document: dict[str, Any]) -> bytes:
        """Convert a document to bytes for storage."""
        ...

    @abstractmethod
    def loads(self, data: bytes) -> dict[str, Any]:
        """Convert bytes back to a document."""
        ...


class JsonSerializer(Serializer):
    """JSON serializer (default). Safe, human-readable, inspectable.

    Args:
        indent: Pretty-print indentation, None for compact output.
    """

    def __init__(self, *, indent: int | None = None):
        self._indent = indent

    def dumps(self, document: dict[str, Any]) -> bytes:
        return json.dumps(document, indent=self._indent, ensure_ascii=False).encode("utf-8")

    def loads(self, data: bytes) -> dict[str, Any]:
        try:
            document = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MapFormatError(f"Stored map is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise MapFormatError("Stored map must be a JSON object")
        return document
