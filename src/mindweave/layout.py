"""Automatic tree layout for the main tree.

Each branch of the primary root is laid out from its sizes: a subtree's
vertical extent is the larger of its node's own slot (height plus spacing)
and the sum of its children's extents, and every node is centered in its
extent. Left branches mirror right branches around the root, and the
shorter branch is centered against the taller one.

Only nodes reachable from the primary root through parent links move;
orphaned sub-trees keep their positions. All walks use explicit stacks, so
chain depth is not bounded by the interpreter recursion limit.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from mindweave.model.graph import children_index
from mindweave.model.types import Branch, Node, Point

LEVEL_WIDTH = 250
NODE_VERTICAL_SPACING = 30


@dataclass
class TreeShape:
    """Size-only view of a subtree, filled bottom-up by ``measure``."""

    id: str
    width: float
    height: float
    children: list[TreeShape] = field(default_factory=list)
    total_height: float = 0.0


def build_tree(
    nodes: Mapping[str, Node],
    node_id: str,
    index: Mapping[str, list[str]] | None = None,
    _seen: set[str] | None = None,
) -> TreeShape:
    """Build the size tree below ``node_id`` from parent links."""
    if index is None:
        index = children_index(nodes)
    seen = _seen if _seen is not None else set()
    seen.add(node_id)

    def shape_of(key: str) -> TreeShape:
        dims = nodes[key].dimensions
        return TreeShape(id=key, width=dims.width, height=dims.height)

    top = shape_of(node_id)
    stack = [top]
    while stack:
        shape = stack.pop()
        for child_id in index.get(shape.id, ()):
            if child_id in seen:
                continue
            seen.add(child_id)
            child = shape_of(child_id)
            shape.children.append(child)
            stack.append(child)
    return top


def _preorder(tree: TreeShape) -> list[TreeShape]:
    order: list[TreeShape] = []
    stack = [tree]
    while stack:
        shape = stack.pop()
        order.append(shape)
        stack.extend(shape.children)
    return order


def measure(tree: TreeShape) -> float:
    """Compute ``total_height`` for ``tree`` and all its descendants."""
    # descendants come after their ancestors in pre-order
    for shape in reversed(_preorder(tree)):
        children_height = sum(child.total_height for child in shape.children)
        shape.total_height = max(shape.height + NODE_VERTICAL_SPACING, children_height)
    return tree.total_height


def place(
    tree: TreeShape,
    level: int,
    y_offset: float,
    direction: Branch,
    positions: dict[str, Point],
) -> None:
    """Write positions for a measured subtree starting at ``y_offset``."""
    stack = [(tree, level, y_offset)]
    while stack:
        shape, depth, top = stack.pop()
        x = depth * LEVEL_WIDTH * direction.sign
        if direction is Branch.LEFT:
            # right edge sits on the level line
            x -= shape.width
        positions[shape.id] = Point(
            x=x,
            y=top + shape.total_height / 2 - shape.height / 2,
        )

        children_height = sum(child.total_height for child in shape.children)
        child_y = top + (shape.total_height - children_height) / 2
        for child in shape.children:
            stack.append((child, depth + 1, child_y))
            child_y += child.total_height


def layout_branch(
    trees: list[TreeShape],
    direction: Branch,
    y_offset: float,
    positions: dict[str, Point],
) -> None:
    """Stack measured branch subtrees top to bottom from ``y_offset``."""
    for tree in trees:
        place(tree, 1, y_offset, direction, positions)
        y_offset += tree.total_height


def auto_layout(nodes: Mapping[str, Node], root_id: str) -> dict[str, Point]:
    """Compute positions for the primary root and its whole tree.

    Returns:
        Map of node id -> new position for every laid-out node. Empty if
        ``root_id`` is missing.
    """
    root = nodes.get(root_id)
    if root is None:
        return {}

    index = children_index(nodes)
    seen = {root_id}
    left: list[TreeShape] = []
    right: list[TreeShape] = []
    for child_id in index.get(root_id, ()):
        tree = build_tree(nodes, child_id, index, seen)
        if nodes[child_id].branch is Branch.LEFT:
            left.append(tree)
        else:
            right.append(tree)

    left_height = sum(measure(tree) for tree in left)
    right_height = sum(measure(tree) for tree in right)
    total_height = max(left_height, right_height)

    positions: dict[str, Point] = {
        root_id: Point(
            x=-(root.dimensions.width / 2),
            y=total_height / 2 - root.dimensions.height / 2,
        )
    }
    layout_branch(right, Branch.RIGHT, (total_height - right_height) / 2, positions)
    layout_branch(left, Branch.LEFT, (total_height - left_height) / 2, positions)
    return positions
