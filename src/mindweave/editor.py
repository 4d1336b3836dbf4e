"""Editor session: the single dispatch entry point for a mind map.

``MindMapEditor`` owns one ``History`` value and replaces it on every
dispatch. Readers only ever see immutable states, so ``state is old_state``
is a valid change check.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import Any

from mindweave.actions import BaseAction, LoadMap, Redo, Undo
from mindweave.events.dispatcher import EventDispatcher
from mindweave.events.processor import EventProcessor
from mindweave.history import History, undoable
from mindweave.model.types import IdFactory, MindMapState, generate_id, new_map
from mindweave.persistence.document import deserialize, serialize
from mindweave.reducer import reduce
from mindweave.visibility import VisibleSet, compute_visible


class MindMapEditor:
    """Holds the current map and its undo history.

    Args:
        state: Initial state (default: a fresh single-root map).
        history_limit: Maximum undo depth (None = unlimited).
        processors: Event processors notified after every dispatch.
        strict_events: Propagate processor exceptions instead of logging them.
        id_factory: Builds ids for new nodes and connections.

    Example:
        >>> editor = MindMapEditor()
        >>> state = editor.dispatch(AddNode(parent_id=editor.state.root_id))
        >>> len(state.nodes)
        2
        >>> editor.can_undo
        True
    """

    def __init__(
        self,
        state: MindMapState | None = None,
        *,
        history_limit: int | None = None,
        processors: list[EventProcessor] | None = None,
        strict_events: bool = False,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self._id_factory = id_factory
        self._reduce = undoable(partial(reduce, id_factory=id_factory), limit=history_limit)
        self._history = History(present=state if state is not None else new_map(id_factory=id_factory))
        self._events = EventDispatcher(processors, strict=strict_events)
        self.session_id = self._events.session_id

    @property
    def state(self) -> MindMapState:
        """The present state."""
        return self._history.present

    @property
    def history(self) -> History:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def events(self) -> EventDispatcher:
        return self._events

    def dispatch(self, action: BaseAction) -> MindMapState:
        """Apply one action and return the new present state."""
        before = self._history
        after = self._reduce(before, action)
        self._history = after
        self._events.publish(action, before, after)
        return after.present

    def undo(self) -> MindMapState:
        return self.dispatch(Undo())

    def redo(self) -> MindMapState:
        return self.dispatch(Redo())

    def visible(self) -> VisibleSet:
        """Nodes and connections currently displayable."""
        return compute_visible(self.state)

    def serialize(self) -> dict[str, Any]:
        """Document for the present state."""
        return serialize(self.state)

    def load(self, document: Mapping[str, Any]) -> MindMapState:
        """Replace the map with a stored document and reset history.

        Raises:
            MapFormatError: If the document is unusable. The editor is left
                untouched in that case.
        """
        return self.dispatch(LoadMap(state=deserialize(document)))

    def close(self) -> None:
        """Shut down event processors."""
        self._events.shutdown()
