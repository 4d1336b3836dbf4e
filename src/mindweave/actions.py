"""Actions accepted by the reducer.

Each action is a frozen dataclass with a ``type`` tag. ``action_from_dict``
and ``action_to_dict`` convert to and from the JSON shape
``{"type": "ADD_NODE", "payload": {...}}`` used by scripted action files.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, get_args

from mindweave.exceptions import UnknownActionError
from mindweave.model.types import Branch, MindMapState, NodeShape, Point


@dataclass(frozen=True)
class BaseAction:
    type: ClassVar[str] = ""


@dataclass(frozen=True)
class NewMap(BaseAction):
    type: ClassVar[str] = "NEW_MAP"
    name: str | None = None


@dataclass(frozen=True)
class LoadMap(BaseAction):
    type: ClassVar[str] = "LOAD_MAP"
    state: MindMapState | None = None


@dataclass(frozen=True)
class SetMapId(BaseAction):
    type: ClassVar[str] = "SET_MAP_ID"
    id: str = ""


@dataclass(frozen=True)
class AddNode(BaseAction):
    """Attach a new child to ``parent_id``.

    ``branch`` only matters when the parent is the primary root.
    """

    type: ClassVar[str] = "ADD_NODE"
    parent_id: str = ""
    content: str | None = None
    branch: Branch | None = None


@dataclass(frozen=True)
class DeleteNode(BaseAction):
    type: ClassVar[str] = "DELETE_NODE"
    node_id: str = ""


@dataclass(frozen=True)
class DeleteNodes(BaseAction):
    type: ClassVar[str] = "DELETE_NODES"
    node_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class UpdateNodeContent(BaseAction):
    type: ClassVar[str] = "UPDATE_NODE_CONTENT"
    node_id: str = ""
    content: str = ""


@dataclass(frozen=True)
class UpdateNodePosition(BaseAction):
    type: ClassVar[str] = "UPDATE_NODE_POSITION"
    node_id: str = ""
    position: Point = Point()


@dataclass(frozen=True)
class UpdateNodeStyle(BaseAction):
    """Shallow-merge style fields; keys use NodeStyle attribute names."""

    type: ClassVar[str] = "UPDATE_NODE_STYLE"
    node_id: str = ""
    style: dict[str, Any] | None = None


@dataclass(frozen=True)
class UpdateMultipleNodesStyle(BaseAction):
    type: ClassVar[str] = "UPDATE_MULTIPLE_NODES_STYLE"
    node_ids: tuple[str, ...] = ()
    style: dict[str, Any] | None = None


@dataclass(frozen=True)
class UpdateNodeShape(BaseAction):
    type: ClassVar[str] = "UPDATE_NODE_SHAPE"
    node_id: str = ""
    shape: NodeShape = NodeShape.ROUNDED_RECTANGLE


@dataclass(frozen=True)
class UpdateMultipleNodesShape(BaseAction):
    type: ClassVar[str] = "UPDATE_MULTIPLE_NODES_SHAPE"
    node_ids: tuple[str, ...] = ()
    shape: NodeShape = NodeShape.ROUNDED_RECTANGLE


@dataclass(frozen=True)
class UpdateNodeDetails(BaseAction):
    """Merge note/link; None leaves the stored value untouched."""

    type: ClassVar[str] = "UPDATE_NODE_DETAILS"
    node_id: str = ""
    note: str | None = None
    link: str | None = None


@dataclass(frozen=True)
class ToggleCollapse(BaseAction):
    type: ClassVar[str] = "TOGGLE_COLLAPSE"
    node_id: str = ""


@dataclass(frozen=True)
class ToggleRootBranchCollapse(BaseAction):
    type: ClassVar[str] = "TOGGLE_ROOT_BRANCH_COLLAPSE"
    branch: Branch = Branch.RIGHT


@dataclass(frozen=True)
class SetSelectedNodes(BaseAction):
    type: ClassVar[str] = "SET_SELECTED_NODES"
    node_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class SetSelectedConnection(BaseAction):
    type: ClassVar[str] = "SET_SELECTED_CONNECTION"
    connection_id: str | None = None


@dataclass(frozen=True)
class AutoLayout(BaseAction):
    type: ClassVar[str] = "AUTO_LAYOUT"


@dataclass(frozen=True)
class AddConnection(BaseAction):
    """Reparent ``to_id`` under ``from_id``."""

    type: ClassVar[str] = "ADD_CONNECTION"
    from_id: str = ""
    to_id: str = ""


@dataclass(frozen=True)
class DeleteConnection(BaseAction):
    type: ClassVar[str] = "DELETE_CONNECTION"
    connection_id: str = ""


@dataclass(frozen=True)
class Undo(BaseAction):
    type: ClassVar[str] = "UNDO"


@dataclass(frozen=True)
class Redo(BaseAction):
    type: ClassVar[str] = "REDO"


Action = (
    NewMap
    | LoadMap
    | SetMapId
    | AddNode
    | DeleteNode
    | DeleteNodes
    | UpdateNodeContent
    | UpdateNodePosition
    | UpdateNodeStyle
    | UpdateMultipleNodesStyle
    | UpdateNodeShape
    | UpdateMultipleNodesShape
    | UpdateNodeDetails
    | ToggleCollapse
    | ToggleRootBranchCollapse
    | SetSelectedNodes
    | SetSelectedConnection
    | AutoLayout
    | AddConnection
    | DeleteConnection
    | Undo
    | Redo
)

ACTION_TYPES: dict[str, type[BaseAction]] = {cls.type: cls for cls in get_args(Action)}

# JSON payload key -> dataclass field name, where they differ
_PAYLOAD_ALIASES = {
    "parentId": "parent_id",
    "nodeId": "node_id",
    "nodeIds": "node_ids",
    "connectionId": "connection_id",
    "from": "from_id",
    "to": "to_id",
}
_FIELD_ALIASES = {v: k for k, v in _PAYLOAD_ALIASES.items()}

_STYLE_KEYS = {
    "backgroundColor": "background_color",
    "borderColor": "border_color",
    "lineColor": "line_color",
    "textColor": "text_color",
    "backgroundOpacity": "background_opacity",
}


def _decode_value(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name == "branch":
        return Branch(value)
    if name == "shape":
        return NodeShape(value)
    if name == "position":
        return Point(x=value["x"], y=value["y"])
    if name == "node_ids":
        return tuple(value)
    if name == "style":
        return {_STYLE_KEYS.get(k, k): v for k, v in value.items()}
    if name == "state":
        from mindweave.persistence.document import deserialize

        return deserialize(value)
    return value


def _encode_value(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in ("branch", "shape"):
        return value.value
    if name == "position":
        return {"x": value.x, "y": value.y}
    if name == "node_ids":
        return list(value)
    if name == "style":
        reverse = {v: k for k, v in _STYLE_KEYS.items()}
        return {reverse.get(k, k): v for k, v in value.items()}
    if name == "state":
        from mindweave.persistence.document import serialize

        return serialize(value)
    return value


def action_from_dict(data: dict[str, Any]) -> Action:
    """Decode ``{"type": ..., "payload": {...}}`` into an action.

    Raises:
        UnknownActionError: If the type tag is unknown or the payload does
            not fit the action.
    """
    action_type = data.get("type", "")
    cls = ACTION_TYPES.get(action_type)
    if cls is None:
        raise UnknownActionError(action_type)

    allowed = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in (data.get("payload") or {}).items():
        name = _PAYLOAD_ALIASES.get(key, key)
        if name not in allowed:
            raise UnknownActionError(
                action_type, f"Action '{action_type}' has no payload field '{key}'"
            )
        try:
            kwargs[name] = _decode_value(name, value)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise UnknownActionError(
                action_type, f"Invalid value for '{key}' in '{action_type}': {e}"
            ) from e
    return cls(**kwargs)  # type: ignore[return-value]


def action_to_dict(action: BaseAction) -> dict[str, Any]:
    """Encode an action as ``{"type": ..., "payload": {...}}``."""
    payload = {
        _FIELD_ALIASES.get(f.name, f.name): _encode_value(f.name, getattr(action, f.name))
        for f in fields(action)
    }
    return {"type": action.type, "payload": payload}
