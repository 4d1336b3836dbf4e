"""Mindweave - a mind-map state engine with undo, layout and visibility."""

from mindweave.actions import (
    Action,
    AddConnection,
    AddNode,
    AutoLayout,
    DeleteConnection,
    DeleteNode,
    DeleteNodes,
    LoadMap,
    NewMap,
    Redo,
    SetMapId,
    SetSelectedConnection,
    SetSelectedNodes,
    ToggleCollapse,
    ToggleRootBranchCollapse,
    Undo,
    UpdateMultipleNodesShape,
    UpdateMultipleNodesStyle,
    UpdateNodeContent,
    UpdateNodeDetails,
    UpdateNodePosition,
    UpdateNodeShape,
    UpdateNodeStyle,
    action_from_dict,
    action_to_dict,
)
from mindweave.editor import MindMapEditor
from mindweave.exceptions import (
    InvariantViolationError,
    MapFormatError,
    MapNotFoundError,
    MindweaveError,
    StoreError,
    UnknownActionError,
)
from mindweave.history import History, undoable
from mindweave.layout import auto_layout
from mindweave.model import (
    Branch,
    Connection,
    Dimensions,
    MindMapState,
    Node,
    NodeShape,
    NodeStyle,
    Point,
    check_invariants,
    new_map,
)
from mindweave.persistence import (
    InMemoryMapStore,
    MapStore,
    SqliteMapStore,
    deserialize,
    serialize,
)
from mindweave.reducer import reduce
from mindweave.visibility import VisibleSet, compute_visible

__all__ = [
    # Model
    "Branch",
    "Connection",
    "Dimensions",
    "MindMapState",
    "Node",
    "NodeShape",
    "NodeStyle",
    "Point",
    "new_map",
    "check_invariants",
    # Actions
    "Action",
    "AddConnection",
    "AddNode",
    "AutoLayout",
    "DeleteConnection",
    "DeleteNode",
    "DeleteNodes",
    "LoadMap",
    "NewMap",
    "Redo",
    "SetMapId",
    "SetSelectedConnection",
    "SetSelectedNodes",
    "ToggleCollapse",
    "ToggleRootBranchCollapse",
    "Undo",
    "UpdateMultipleNodesShape",
    "UpdateMultipleNodesStyle",
    "UpdateNodeContent",
    "UpdateNodeDetails",
    "UpdateNodePosition",
    "UpdateNodeShape",
    "UpdateNodeStyle",
    "action_from_dict",
    "action_to_dict",
    # Engine
    "reduce",
    "auto_layout",
    "compute_visible",
    "VisibleSet",
    "History",
    "undoable",
    "MindMapEditor",
    # Persistence
    "serialize",
    "deserialize",
    "MapStore",
    "InMemoryMapStore",
    "SqliteMapStore",
    # Errors
    "MindweaveError",
    "MapFormatError",
    "MapNotFoundError",
    "StoreError",
    "UnknownActionError",
    "InvariantViolationError",
]
