"""Conversion between map states and plain JSON-compatible documents.

Documents use the camelCase field names of the stored format::

    {
      "id": "map-1", "name": "Central Idea", "rootId": "node_a",
      "nodes": {"node_a": {"id": "node_a", "parentId": null, ...}},
      "connections": [{"id": "conn_b", "from": "node_a", "to": "node_b"}]
    }

Older documents may lack fields; ``deserialize`` fills them in.
Selection is session state and is never written.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mindweave.exceptions import MapFormatError
from mindweave.model.graph import sync_parents
from mindweave.model.types import (
    DEFAULT_CONTENT,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    Branch,
    Connection,
    Dimensions,
    MindMapState,
    Node,
    NodeShape,
    NodeStyle,
    Point,
)

_STYLE_FIELDS = {
    "backgroundColor": "background_color",
    "borderColor": "border_color",
    "lineColor": "line_color",
    "textColor": "text_color",
    "backgroundOpacity": "background_opacity",
}


def _node_to_dict(node: Node, is_root: bool) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": node.id,
        "parentId": node.parent_id,
        "content": node.content,
        "position": {"x": node.position.x, "y": node.position.y},
        "dimensions": {"width": node.dimensions.width, "height": node.dimensions.height},
        "style": {key: getattr(node.style, attr) for key, attr in _STYLE_FIELDS.items()},
        "shape": node.shape.value,
        "note": node.note,
        "link": node.link,
        "isCollapsed": node.is_collapsed,
    }
    if node.branch is not None:
        data["branch"] = node.branch.value
    if is_root:
        data["isLeftCollapsed"] = node.is_left_collapsed
        data["isRightCollapsed"] = node.is_right_collapsed
    return data


def serialize(state: MindMapState) -> dict[str, Any]:
    """Turn a state into a JSON-compatible document."""
    document: dict[str, Any] = {
        "name": state.name,
        "rootId": state.root_id,
        "nodes": {
            node_id: _node_to_dict(node, node_id == state.root_id)
            for node_id, node in state.nodes.items()
        },
        "connections": [{"id": c.id, "from": c.from_id, "to": c.to_id} for c in state.connections],
    }
    if state.id is not None:
        document["id"] = state.id
    return document


def _node_from_dict(node_id: str, data: Mapping[str, Any]) -> Node:
    position = data.get("position") or {}
    dimensions = data.get("dimensions") or {}
    style = data.get("style") or {}
    branch = data.get("branch")
    return Node(
        id=node_id,
        parent_id=data.get("parentId"),
        content=str(data.get("content", DEFAULT_CONTENT)),
        position=Point(x=position.get("x", 0), y=position.get("y", 0)),
        dimensions=Dimensions(
            width=dimensions.get("width", DEFAULT_WIDTH),
            height=dimensions.get("height", DEFAULT_HEIGHT),
        ),
        style=NodeStyle().merged(
            **{attr: style[key] for key, attr in _STYLE_FIELDS.items() if key in style}
        ),
        shape=NodeShape(data.get("shape") or NodeShape.ROUNDED_RECTANGLE.value),
        note=data.get("note") or "",
        link=data.get("link") or "",
        is_collapsed=bool(data.get("isCollapsed", False)),
        is_left_collapsed=bool(data.get("isLeftCollapsed", False)),
        is_right_collapsed=bool(data.get("isRightCollapsed", False)),
        branch=Branch(branch) if branch else None,
    )


def _synthesize_connections(nodes: Mapping[str, Node]) -> tuple[Connection, ...]:
    """One connection per parented node, for documents that predate the list."""
    return tuple(
        Connection(id=f"conn_{node.id}", from_id=node.parent_id, to_id=node.id)
        for node in nodes.values()
        if node.parent_id is not None
    )


def deserialize(document: Mapping[str, Any]) -> MindMapState:
    """Build a state from a document, defaulting fields missing in old formats.

    Raises:
        MapFormatError: If the document has no usable nodes map or root.
    """
    if not isinstance(document, Mapping):
        raise MapFormatError(f"Map document must be an object, got {type(document).__name__}")
    raw_nodes = document.get("nodes")
    if not isinstance(raw_nodes, Mapping) or not raw_nodes:
        raise MapFormatError("Map document has no 'nodes' object")
    root_id = document.get("rootId")
    if root_id not in raw_nodes:
        raise MapFormatError(f"Map document root '{root_id}' is not one of its nodes")

    try:
        nodes = {str(node_id): _node_from_dict(str(node_id), data) for node_id, data in raw_nodes.items()}
        raw_connections = document.get("connections")
        if raw_connections is None:
            connections = _synthesize_connections(nodes)
        else:
            connections = tuple(
                Connection(id=str(c["id"]), from_id=str(c["from"]), to_id=str(c["to"]))
                for c in raw_connections
            )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MapFormatError(f"Malformed map document: {e}") from e

    root = nodes[root_id]
    state = MindMapState(
        nodes=nodes,
        connections=connections,
        root_id=root_id,
        id=document.get("id"),
        name=str(document.get("name") or root.content),
    )
    return sync_parents(state)
