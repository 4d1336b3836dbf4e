"""Event types emitted by an editor session."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field


def _generate_event_id() -> str:
    """Generate a unique event ID."""
    return uuid.uuid4().hex[:16]


def _now() -> float:
    """Current timestamp."""
    return time.time()


@dataclass(frozen=True)
class BaseEvent:
    """Base class for all editor events.

    Attributes:
        session_id: Identifier of the editor session that produced this event.
        event_id: Unique identifier for this event.
        timestamp: Unix timestamp when the event was created.
    """

    session_id: str
    event_id: str = field(default_factory=_generate_event_id)
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class ActionAppliedEvent(BaseEvent):
    """Emitted when an action produced a new state.

    Attributes:
        action_type: Type tag of the action (e.g. ``"ADD_NODE"``).
        undoable: Whether the change was recorded as a history step.
        node_count: Number of nodes after the change.
    """

    action_type: str = ""
    undoable: bool = True
    node_count: int = 0


@dataclass(frozen=True)
class ActionIgnoredEvent(BaseEvent):
    """Emitted when the reducer returned the state unchanged.

    Attributes:
        action_type: Type tag of the rejected or redundant action.
    """

    action_type: str = ""


@dataclass(frozen=True)
class UndoEvent(BaseEvent):
    """Emitted after a successful undo.

    Attributes:
        past_size: Remaining undo steps.
        future_size: Available redo steps.
    """

    past_size: int = 0
    future_size: int = 0


@dataclass(frozen=True)
class RedoEvent(BaseEvent):
    """Emitted after a successful redo."""

    past_size: int = 0
    future_size: int = 0


@dataclass(frozen=True)
class MapReplacedEvent(BaseEvent):
    """Emitted when NewMap or LoadMap starts a fresh timeline.

    Attributes:
        action_type: ``"NEW_MAP"`` or ``"LOAD_MAP"``.
        map_id: Persistence id of the installed map, if any.
        name: Name of the installed map.
    """

    action_type: str = ""
    map_id: str | None = None
    name: str = ""


Event = ActionAppliedEvent | ActionIgnoredEvent | UndoEvent | RedoEvent | MapReplacedEvent
