"""Formatting utilities for CLI output.

Handles aligned tables, tree rendering and JSON envelope wrapping.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mindweave.model.types import MindMapState

# JSON envelope version, bump on breaking changes to JSON structure
SCHEMA_VERSION = 1

MAX_LINES = 200


def json_envelope(command: str, data: Any) -> dict[str, Any]:
    """Wrap data in the standard JSON output envelope."""
    return {
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def print_json(command: str, data: Any, output: str | None = None) -> None:
    """Print JSON envelope to stdout or write to file."""
    envelope = json_envelope(command, data)
    text = json.dumps(envelope, indent=2, default=str)

    if output:
        with open(output, "w") as f:
            f.write(text)
        size_kb = len(text.encode()) / 1024
        print(f"Wrote {command} output to {output} ({size_kb:.1f}KB)")
    else:
        print(text)


def format_datetime(dt: datetime | None) -> str:
    """Format datetime for display."""
    if dt is None:
        return "—"
    return dt.strftime("%Y-%m-%d %H:%M")


def print_table(headers: list[str], rows: list[list[str]], indent: int = 2) -> list[str]:
    """Format a table with aligned columns.

    Returns list of lines (does not print).
    """
    if not rows:
        return []

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(cell))

    prefix = " " * indent
    lines = [
        prefix + "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)),
        prefix + "  ".join("─" * w for w in widths),
    ]
    for row in rows:
        cells = []
        for i, cell in enumerate(row[: len(widths)]):
            if headers[i] == "Nodes":
                cells.append(cell.rjust(widths[i]))
            else:
                cells.append(cell.ljust(widths[i]))
        lines.append(prefix + "  ".join(cells))
    return lines


def print_lines(lines: list[str], max_lines: int = MAX_LINES) -> None:
    """Print lines with truncation warning if too many."""
    for line in lines[:max_lines]:
        print(line)
    if len(lines) > max_lines:
        remaining = len(lines) - max_lines
        print(f"\n  # ... {remaining} more lines")


def _node_label(state: MindMapState, node_id: str) -> str:
    node = state.nodes[node_id]
    marks = []
    if node.branch is not None and node.parent_id == state.root_id:
        marks.append(node.branch.value)
    if node.is_collapsed:
        marks.append("collapsed")
    if node_id == state.root_id:
        if node.is_left_collapsed:
            marks.append("left collapsed")
        if node.is_right_collapsed:
            marks.append("right collapsed")
    suffix = f"  [{', '.join(marks)}]" if marks else ""
    return f"{node.content}{suffix}"


def tree_lines(state: MindMapState, visible: set[str] | None = None) -> list[str]:
    """Render every tree (primary first) as indented lines.

    Args:
        state: Map to render.
        visible: Restrict output to these node ids (None = all nodes).
    """
    from mindweave.model.graph import children_index

    index = children_index(state.nodes)
    roots = [state.root_id] + [
        n.id for n in state.nodes.values() if n.parent_id is None and n.id != state.root_id
    ]
    lines: list[str] = []
    seen: set[str] = set()
    for root_id in roots:
        if visible is not None and root_id not in visible:
            continue
        if root_id != state.root_id:
            lines.append("")
            lines.append("(detached)")
        stack = [(root_id, 0)]
        while stack:
            node_id, depth = stack.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            lines.append("  " * depth + ("- " if depth else "") + _node_label(state, node_id))
            children = [c for c in index.get(node_id, ()) if visible is None or c in visible]
            stack.extend((c, depth + 1) for c in reversed(children))
    return lines
