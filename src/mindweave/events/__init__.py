"""Event system for observing an editor session."""

from mindweave.events.dispatcher import EventDispatcher
from mindweave.events.processor import (
    EventProcessor,
    EventRecorder,
    TypedEventProcessor,
)
from mindweave.events.types import (
    ActionAppliedEvent,
    ActionIgnoredEvent,
    BaseEvent,
    Event,
    MapReplacedEvent,
    RedoEvent,
    UndoEvent,
)

__all__ = [
    # Event types
    "BaseEvent",
    "Event",
    "ActionAppliedEvent",
    "ActionIgnoredEvent",
    "MapReplacedEvent",
    "RedoEvent",
    "UndoEvent",
    # Processor interfaces
    "EventProcessor",
    "EventRecorder",
    "TypedEventProcessor",
    # Dispatcher
    "EventDispatcher",
]
