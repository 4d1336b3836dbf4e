"""Event processor base classes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mindweave.events.types import (
        ActionAppliedEvent,
        ActionIgnoredEvent,
        Event,
        MapReplacedEvent,
        RedoEvent,
        UndoEvent,
    )


# Mapping from event class name to handler method name.
_EVENT_METHOD_MAP: dict[str, str] = {
    "ActionAppliedEvent": "on_action_applied",
    "ActionIgnoredEvent": "on_action_ignored",
    "UndoEvent": "on_undo",
    "RedoEvent": "on_redo",
    "MapReplacedEvent": "on_map_replaced",
}


class EventProcessor:
    """Base class for event consumers.

    Subclass and override ``on_event`` to receive all events,
    or use ``TypedEventProcessor`` for per-type dispatch.
    """

    def on_event(self, event: Event) -> None:
        """Called for every event. Override in subclasses."""

    def shutdown(self) -> None:
        """Called once when the session is closed. Override to flush buffers."""


class TypedEventProcessor(EventProcessor):
    """Dispatches ``on_event`` to typed handler methods automatically.

    Override any of the ``on_*`` methods below to handle specific event types.
    Unhandled event types are silently ignored.
    """

    def on_event(self, event: Event) -> None:
        method_name = _EVENT_METHOD_MAP.get(type(event).__name__)
        if method_name is not None:
            method = getattr(self, method_name, None)
            if method is not None:
                method(event)

    def on_action_applied(self, event: ActionAppliedEvent) -> None: ...
    def on_action_ignored(self, event: ActionIgnoredEvent) -> None: ...
    def on_undo(self, event: UndoEvent) -> None: ...
    def on_redo(self, event: RedoEvent) -> None: ...
    def on_map_replaced(self, event: MapReplacedEvent) -> None: ...


class EventRecorder(EventProcessor):
    """Keeps every received event in ``events``, in order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def on_event(self, event: Event) -> None:
        self.events.append(event)
