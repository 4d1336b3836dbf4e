"""Exceptions raised at the collaborator surface of mindweave.

The reducer never raises: invalid actions are no-ops. These errors belong
to the code around it (document decoding, action parsing, storage).
"""

from __future__ import annotations


class MindweaveError(Exception):
    """Base class for all mindweave errors.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MapFormatError(MindweaveError):
    """A stored document cannot be turned into a valid map state."""


class UnknownActionError(MindweaveError):
    """An action dict carries a type tag or payload that cannot be decoded.

    Attributes:
        action_type: The offending type tag
    """

    def __init__(self, action_type: str, message: str | None = None) -> None:
        self.action_type = action_type
        super().__init__(message or f"Unknown action type: '{action_type}'")


class InvariantViolationError(MindweaveError):
    """A state breaks one or more structural invariants.

    Attributes:
        issues: One line per violated invariant
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = issues
        lines = "\n".join(f"  -> {issue}" for issue in issues)
        super().__init__(f"Mind map state is inconsistent:\n{lines}")


class StoreError(MindweaveError):
    """A storage backend failed to complete a call."""


class MapNotFoundError(StoreError):
    """No stored map has the requested id.

    Attributes:
        map_id: The id that was looked up
    """

    def __init__(self, map_id: str) -> None:
        self.map_id = map_id
        super().__init__(f"Map '{map_id}' not found")
