"""Undo/redo history wrapped around the reducer.

History is a plain value threaded through ``dispatch``; there is no hidden
global stack. ``undoable(reducer)`` returns a reducer over ``History``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from mindweave.actions import (
    BaseAction,
    LoadMap,
    NewMap,
    Redo,
    SetMapId,
    SetSelectedConnection,
    SetSelectedNodes,
    Undo,
)
from mindweave.model.types import MindMapState

# Applied to the present only; never recorded as a step
NON_UNDOABLE: tuple[type[BaseAction], ...] = (SetSelectedNodes, SetSelectedConnection, SetMapId)

# Start a fresh timeline
TIMELINE_RESETS: tuple[type[BaseAction], ...] = (NewMap, LoadMap)

Reducer = Callable[[MindMapState, BaseAction], MindMapState]


@dataclass(frozen=True)
class History:
    """Past, present and future states.

    Attributes:
        past: Older states, most recent last.
        present: The current state.
        future: Undone states, next redo first.
    """

    present: MindMapState
    past: tuple[MindMapState, ...] = ()
    future: tuple[MindMapState, ...] = ()

    @property
    def can_undo(self) -> bool:
        return len(self.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.future) > 0


def undoable(reducer: Reducer, *, limit: int | None = None) -> Callable[[History, BaseAction], History]:
    """Wrap ``reducer`` with undo/redo.

    Args:
        reducer: Base state reducer; must return the same object for no-ops.
        limit: Maximum number of past states kept (None = unlimited).

    Returns:
        A reducer over History. It returns the same History object when the
        action changed nothing.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"History limit must be non-negative, got {limit}")

    def _trim(past: tuple[MindMapState, ...]) -> tuple[MindMapState, ...]:
        if limit is not None and len(past) > limit:
            return past[len(past) - limit :]
        return past

    def reduce_history(history: History, action: BaseAction) -> History:
        if isinstance(action, NON_UNDOABLE):
            present = reducer(history.present, action)
            if present is history.present:
                return history
            return replace(history, present=present)

        if isinstance(action, Undo):
            if not history.past:
                return history
            return History(
                past=history.past[:-1],
                present=history.past[-1],
                future=(history.present, *history.future),
            )

        if isinstance(action, Redo):
            if not history.future:
                return history
            return History(
                past=_trim((*history.past, history.present)),
                present=history.future[0],
                future=history.future[1:],
            )

        if isinstance(action, TIMELINE_RESETS):
            return History(present=reducer(history.present, action))

        present = reducer(history.present, action)
        if present is history.present:
            return history
        return History(past=_trim((*history.past, history.present)), present=present)

    return reduce_history
