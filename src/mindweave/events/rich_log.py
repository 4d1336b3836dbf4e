"""Rich-based console log of editor events."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from mindweave.events.processor import TypedEventProcessor

if TYPE_CHECKING:
    from mindweave.events.types import (
        ActionAppliedEvent,
        ActionIgnoredEvent,
        MapReplacedEvent,
        RedoEvent,
        UndoEvent,
    )


def _require_rich() -> None:
    """Raise a clear error if rich is not installed."""
    try:
        import rich  # noqa: F401
    except ImportError:
        raise ImportError(
            "The 'rich' package is required for RichEventLog. Install it with: pip install 'mindweave[cli]' or pip install rich"
        ) from None


def _timestamp(ts: float) -> str:
    """Format an event timestamp as [HH:MM:SS]."""
    return datetime.fromtimestamp(ts).strftime("[%H:%M:%S]")


class RichEventLog(TypedEventProcessor):
    """Prints one styled line per editor event.

    Ignored actions are only shown with ``show_ignored=True``, since a drag
    that ends where it started or a rejected reparent is usually noise.
    """

    def __init__(self, *, console: Any = None, show_ignored: bool = False) -> None:
        _require_rich()
        from rich.console import Console

        self._console = console or Console(stderr=True)
        self._show_ignored = show_ignored
        self.lines_written = 0

    def _print(self, ts: float, markup: str) -> None:
        self._console.print(f"[dim]{_timestamp(ts)}[/dim] {markup}", highlight=False)
        self.lines_written += 1

    def on_action_applied(self, event: ActionAppliedEvent) -> None:
        marker = "[green]+[/green]" if event.undoable else "[blue]~[/blue]"
        self._print(event.timestamp, f"{marker} {event.action_type} ({event.node_count} nodes)")

    def on_action_ignored(self, event: ActionIgnoredEvent) -> None:
        if self._show_ignored:
            self._print(event.timestamp, f"[yellow]-[/yellow] {event.action_type} [dim](no change)[/dim]")

    def on_undo(self, event: UndoEvent) -> None:
        self._print(event.timestamp, f"[magenta]<[/magenta] UNDO ({event.past_size} left, {event.future_size} redoable)")

    def on_redo(self, event: RedoEvent) -> None:
        self._print(event.timestamp, f"[magenta]>[/magenta] REDO ({event.past_size} undoable, {event.future_size} left)")

    def on_map_replaced(self, event: MapReplacedEvent) -> None:
        label = event.map_id or "unsaved"
        self._print(event.timestamp, f"[bold]*[/bold] {event.action_type} '{event.name}' ({label})")
