"""Core entities of a mind map: nodes, connections and the full state."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable

# Default geometry for freshly created nodes
DEFAULT_WIDTH = 160
DEFAULT_HEIGHT = 60
DEFAULT_CONTENT = "New Idea"
ROOT_CONTENT = "Central Idea"


class Branch(str, Enum):
    """Side of the primary root a node hangs from.

    Values:
        LEFT: Node belongs to the root's left branch.
        RIGHT: Node belongs to the root's right branch.
    """

    LEFT = "left"
    RIGHT = "right"

    @property
    def sign(self) -> int:
        """+1 for right, -1 for left."""
        return 1 if self is Branch.RIGHT else -1


class NodeShape(str, Enum):
    """Outline drawn around a node."""

    ROUNDED_RECTANGLE = "rounded-rectangle"
    RECTANGLE = "rectangle"
    OVAL = "oval"


@dataclass(frozen=True)
class Point:
    x: float = 0
    y: float = 0


@dataclass(frozen=True)
class Dimensions:
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT


@dataclass(frozen=True)
class NodeStyle:
    """Visual style of a node.

    Attributes:
        background_color: Fill color.
        border_color: Outline color.
        line_color: Color of the edge drawn to this node's children.
        text_color: Content color.
        background_opacity: Fill opacity in [0, 1].
    """

    background_color: str = "#ffffff"
    border_color: str = "#3b82f6"
    line_color: str = "#6b7280"
    text_color: str = "#1f2937"
    background_opacity: float = 1

    def merged(self, **changes: Any) -> NodeStyle:
        """Return a copy with the given fields replaced (unknown keys ignored)."""
        known = {k: v for k, v in changes.items() if k in _STYLE_FIELDS and v is not None}
        if "background_opacity" in known:
            known["background_opacity"] = min(1.0, max(0.0, float(known["background_opacity"])))
        if all(getattr(self, k) == v for k, v in known.items()):
            return self
        return replace(self, **known)


_STYLE_FIELDS = frozenset(
    {"background_color", "border_color", "line_color", "text_color", "background_opacity"}
)


@dataclass(frozen=True)
class Node:
    """A single idea on the map.

    ``parent_id`` and ``branch`` are caches of the connection list: the
    connection whose ``to`` is this node decides the parent, and the branch
    follows from the parent chain.

    Attributes:
        id: Unique node id.
        parent_id: Id of the parent node, or None for any tree root.
        content: Text shown in the node.
        position: Top-left corner in map coordinates.
        dimensions: Rendered size, used by layout.
        style: Visual style.
        shape: Outline shape.
        note: Free-form note.
        link: Free-form link.
        is_collapsed: Hides this node's children (non-root nodes).
        is_left_collapsed: Hides the left branch (primary root only).
        is_right_collapsed: Hides the right branch (primary root only).
        branch: Side of the primary root, None outside the main tree.
    """

    id: str
    parent_id: str | None = None
    content: str = DEFAULT_CONTENT
    position: Point = field(default_factory=Point)
    dimensions: Dimensions = field(default_factory=Dimensions)
    style: NodeStyle = field(default_factory=NodeStyle)
    shape: NodeShape = NodeShape.ROUNDED_RECTANGLE
    note: str = ""
    link: str = ""
    is_collapsed: bool = False
    is_left_collapsed: bool = False
    is_right_collapsed: bool = False
    branch: Branch | None = None

    @property
    def is_tree_root(self) -> bool:
        """True for the primary root and for orphaned sub-tree roots."""
        return self.parent_id is None


@dataclass(frozen=True)
class Connection:
    """Tree edge ``from_id -> to_id`` (parent -> child)."""

    id: str
    from_id: str
    to_id: str


@dataclass(frozen=True)
class MindMapState:
    """Complete, immutable snapshot of a mind map.

    A state is never mutated once returned; every mutation builds a new
    ``nodes`` dict that shares untouched ``Node`` objects with the old one.

    Attributes:
        nodes: Map of node id -> Node.
        connections: Tree edges, order irrelevant.
        root_id: Id of the permanent primary root.
        selected_node_ids: Currently selected nodes.
        selected_connection_id: Currently selected connection.
        id: Persistence identity, None until first saved.
        name: Map name, mirrors the root's content.
    """

    nodes: dict[str, Node]
    connections: tuple[Connection, ...]
    root_id: str
    selected_node_ids: tuple[str, ...] = ()
    selected_connection_id: str | None = None
    id: str | None = None
    name: str = ROOT_CONTENT

    @property
    def root(self) -> Node:
        """The primary root node."""
        return self.nodes[self.root_id]

    def is_primary_root(self, node_id: str) -> bool:
        return node_id == self.root_id

    def is_orphan_root(self, node_id: str) -> bool:
        """True for a parentless node that is not the primary root."""
        node = self.nodes.get(node_id)
        return node is not None and node.parent_id is None and node_id != self.root_id

    def children_of(self, node_id: str) -> list[Node]:
        """Direct children in insertion order."""
        return [n for n in self.nodes.values() if n.parent_id == node_id]

    def connection_to(self, node_id: str) -> Connection | None:
        """The connection whose child end is ``node_id``, if any."""
        for conn in self.connections:
            if conn.to_id == node_id:
                return conn
        return None

    def evolve(self, **changes: Any) -> MindMapState:
        """Return a new state with the given fields replaced."""
        return replace(self, **changes)


IdFactory = Callable[[str], str]


def generate_id(prefix: str) -> str:
    """Random id such as ``node_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


def new_node(
    node_id: str,
    parent_id: str | None = None,
    content: str = DEFAULT_CONTENT,
    **fields: Any,
) -> Node:
    """Build a node with default style, size and shape."""
    return Node(id=node_id, parent_id=parent_id, content=content, **fields)


def new_map(name: str = ROOT_CONTENT, *, id_factory: IdFactory = generate_id) -> MindMapState:
    """Build a single-root, empty map with default styling."""
    root = new_node(id_factory("node"), None, name)
    return MindMapState(
        nodes={root.id: root},
        connections=(),
        root_id=root.id,
        name=root.content,
    )
