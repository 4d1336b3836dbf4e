"""Mind map data model: entities and graph helpers."""

from mindweave.model.graph import (
    assert_invariants,
    check_invariants,
    descendant_closure,
    is_ancestor,
    is_in_main_tree,
    to_nx_graph,
)
from mindweave.model.types import (
    Branch,
    Connection,
    Dimensions,
    MindMapState,
    Node,
    NodeShape,
    NodeStyle,
    Point,
    generate_id,
    new_map,
    new_node,
)

__all__ = [
    "Branch",
    "Connection",
    "Dimensions",
    "MindMapState",
    "Node",
    "NodeShape",
    "NodeStyle",
    "Point",
    "generate_id",
    "new_map",
    "new_node",
    "assert_invariants",
    "check_invariants",
    "descendant_closure",
    "is_ancestor",
    "is_in_main_tree",
    "to_nx_graph",
]
