"""Turns editor transitions into events and hands them to processors."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Callable

from mindweave.actions import LoadMap, NewMap, Redo, Undo
from mindweave.events.processor import EventProcessor
from mindweave.events.types import (
    ActionAppliedEvent,
    ActionIgnoredEvent,
    MapReplacedEvent,
    RedoEvent,
    UndoEvent,
)
from mindweave.history import NON_UNDOABLE

if TYPE_CHECKING:
    from mindweave.actions import BaseAction
    from mindweave.events.types import Event
    from mindweave.history import History

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Event fan-out for one editor session.

    Every event built by ``publish`` carries this dispatcher's
    ``session_id``. A processor that raises is logged and skipped so the
    editor keeps working; with ``strict=True`` the exception propagates.
    """

    def __init__(
        self,
        processors: list[EventProcessor] | None = None,
        *,
        session_id: str | None = None,
        strict: bool = False,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex[:16]
        self._processors: list[EventProcessor] = list(processors or ())
        self._strict = strict

    @property
    def active(self) -> bool:
        """True if anyone is listening."""
        return bool(self._processors)

    def add(self, processor: EventProcessor) -> None:
        self._processors.append(processor)

    def publish(self, action: BaseAction, before: History, after: History) -> Event | None:
        """Emit the event describing one dispatch.

        Returns:
            The emitted event, or None when no processor is registered (the
            event is then never built).
        """
        if not self._processors:
            return None
        event = self.describe(action, before, after)
        self.emit(event)
        return event

    def describe(self, action: BaseAction, before: History, after: History) -> Event:
        """Classify a dispatch by what it did to the history."""
        sid = self.session_id
        if isinstance(action, (NewMap, LoadMap)):
            return MapReplacedEvent(
                session_id=sid,
                action_type=action.type,
                map_id=after.present.id,
                name=after.present.name,
            )
        if after is before:
            return ActionIgnoredEvent(session_id=sid, action_type=action.type)
        if isinstance(action, (Undo, Redo)):
            event_type = UndoEvent if isinstance(action, Undo) else RedoEvent
            return event_type(session_id=sid, past_size=len(after.past), future_size=len(after.future))
        return ActionAppliedEvent(
            session_id=sid,
            action_type=action.type,
            undoable=not isinstance(action, NON_UNDOABLE),
            node_count=len(after.present.nodes),
        )

    def emit(self, event: Event) -> None:
        """Send ``event`` to every processor in registration order."""
        failure = f"failed on {type(event).__name__}"
        for processor in self._processors:
            error = self._guarded(processor, failure, lambda p=processor: p.on_event(event))
            if error is not None:
                raise error

    def shutdown(self) -> None:
        """Shut down every processor, then re-raise the first strict failure."""
        first_error = None
        for processor in self._processors:
            error = self._guarded(processor, "failed during shutdown", processor.shutdown)
            if first_error is None:
                first_error = error
        if first_error is not None:
            raise first_error

    def _guarded(
        self,
        processor: EventProcessor,
        failure: str,
        call: Callable[[], None],
    ) -> Exception | None:
        """Run ``call``; log its exception, or return it when strict."""
        try:
            call()
        except Exception as e:
            if self._strict:
                return e
            logger.warning("Event processor %r %s", processor, failure, exc_info=True)
        return None
