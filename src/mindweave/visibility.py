"""Which nodes and connections are displayable under the collapse flags."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from mindweave.model.graph import children_index
from mindweave.model.types import Branch, Connection, MindMapState, Node


@dataclass(frozen=True)
class VisibleSet:
    """Result of ``compute_visible``.

    Attributes:
        nodes: Visible nodes in traversal order (primary tree first).
        connections: Connections whose both endpoints are visible.
    """

    nodes: tuple[Node, ...]
    connections: tuple[Connection, ...]

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(n.id for n in self.nodes)


def _shows_child(state: MindMapState, parent: Node, child: Node) -> bool:
    if parent.id == state.root_id:
        if child.branch is Branch.LEFT:
            return not parent.is_left_collapsed
        if child.branch is Branch.RIGHT:
            return not parent.is_right_collapsed
        return True
    return not parent.is_collapsed


def visible_node_ids(state: MindMapState) -> list[str]:
    """Breadth-first walk from every tree root, honoring collapse flags.

    The primary root is walked first, then each orphan root in insertion
    order. A seen-set guards against revisiting nodes in malformed data.
    """
    index = children_index(state.nodes)
    roots = [state.root_id] if state.root_id in state.nodes else []
    roots += [n.id for n in state.nodes.values() if n.parent_id is None and n.id != state.root_id]

    seen: set[str] = set()
    order: list[str] = []
    for root_id in roots:
        if root_id in seen:
            continue
        seen.add(root_id)
        order.append(root_id)
        queue = deque([root_id])
        while queue:
            parent = state.nodes[queue.popleft()]
            for child_id in index.get(parent.id, ()):
                if child_id in seen or not _shows_child(state, parent, state.nodes[child_id]):
                    continue
                seen.add(child_id)
                order.append(child_id)
                queue.append(child_id)
    return order


def compute_visible(state: MindMapState) -> VisibleSet:
    """Visible nodes and the connections between them."""
    ids = visible_node_ids(state)
    visible = set(ids)
    return VisibleSet(
        nodes=tuple(state.nodes[i] for i in ids),
        connections=tuple(
            c for c in state.connections if c.from_id in visible and c.to_id in visible
        ),
    )
