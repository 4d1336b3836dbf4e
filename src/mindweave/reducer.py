"""Pure state transitions for a mind map.

``reduce(state, action)`` applies one action and returns the next state.
It never raises: an action that references missing ids, tries to move or
delete the primary root, would create a cycle, or changes nothing returns
the very same ``state`` object. The history wrapper relies on that identity
to skip no-op entries.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable

from mindweave.actions import (
    AddConnection,
    AddNode,
    AutoLayout,
    BaseAction,
    DeleteConnection,
    DeleteNode,
    DeleteNodes,
    LoadMap,
    NewMap,
    SetMapId,
    SetSelectedConnection,
    SetSelectedNodes,
    ToggleCollapse,
    ToggleRootBranchCollapse,
    UpdateMultipleNodesShape,
    UpdateMultipleNodesStyle,
    UpdateNodeContent,
    UpdateNodeDetails,
    UpdateNodePosition,
    UpdateNodeShape,
    UpdateNodeStyle,
)
from mindweave.layout import LEVEL_WIDTH, NODE_VERTICAL_SPACING, auto_layout
from mindweave.model.graph import (
    descendant_closure,
    is_ancestor,
    is_in_main_tree,
    propagate_branch,
    sync_parents,
)
from mindweave.model.types import (
    DEFAULT_CONTENT,
    ROOT_CONTENT,
    Branch,
    Connection,
    IdFactory,
    MindMapState,
    Node,
    NodeShape,
    Point,
    generate_id,
    new_map,
    new_node,
)

logger = logging.getLogger(__name__)

Handler = Callable[[MindMapState, Any, IdFactory], MindMapState]
_HANDLERS: dict[type[BaseAction], Handler] = {}


def _handles(action_cls: type[BaseAction]) -> Callable[[Handler], Handler]:
    def register(func: Handler) -> Handler:
        _HANDLERS[action_cls] = func
        return func

    return register


def reduce(
    state: MindMapState,
    action: BaseAction,
    *,
    id_factory: IdFactory = generate_id,
) -> MindMapState:
    """Apply ``action`` to ``state``.

    Args:
        state: Current state (never modified).
        action: Action to apply. Unknown action types are ignored.
        id_factory: Builds ids for new nodes and connections from a prefix.

    Returns:
        The next state, or ``state`` itself when nothing changed.
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action, id_factory)


def _coerce(enum_cls: type, value: Any) -> Any:
    """Enum member for ``value``, or None if it is not a valid member."""
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _replace_nodes(state: MindMapState, updates: dict[str, Node], **changes: Any) -> MindMapState:
    """New state with ``updates`` merged over a copy of ``state.nodes``."""
    if not updates and not changes:
        return state
    nodes = {**state.nodes, **updates}
    return state.evolve(nodes=nodes, **changes)


def _update_many(
    state: MindMapState,
    node_ids: tuple[str, ...],
    change: Callable[[Node], Node],
) -> MindMapState:
    updates = {}
    for node_id in node_ids:
        node = state.nodes.get(node_id)
        if node is None:
            continue
        updated = change(node)
        if updated is not node:
            updates[node_id] = updated
    return _replace_nodes(state, updates)


# === Map lifecycle ===


@_handles(NewMap)
def _new_map(state: MindMapState, action: NewMap, id_factory: IdFactory) -> MindMapState:
    return new_map(action.name or ROOT_CONTENT, id_factory=id_factory)


@_handles(LoadMap)
def _load_map(state: MindMapState, action: LoadMap, id_factory: IdFactory) -> MindMapState:
    if action.state is None or action.state.root_id not in action.state.nodes:
        logger.debug("LoadMap ignored: no state or missing root")
        return state
    return _prune_selection(sync_parents(action.state))


def _prune_selection(state: MindMapState) -> MindMapState:
    """Drop selected ids that no longer exist; nodes win over a connection."""
    node_ids = tuple(i for i in dict.fromkeys(state.selected_node_ids) if i in state.nodes)
    connection_id = state.selected_connection_id
    if node_ids or not any(c.id == connection_id for c in state.connections):
        connection_id = None
    if node_ids == state.selected_node_ids and connection_id == state.selected_connection_id:
        return state
    return state.evolve(selected_node_ids=node_ids, selected_connection_id=connection_id)


@_handles(SetMapId)
def _set_map_id(state: MindMapState, action: SetMapId, id_factory: IdFactory) -> MindMapState:
    if state.id == action.id:
        return state
    return state.evolve(id=action.id)


# === Nodes ===


def _resolve_branch(state: MindMapState, parent: Node, requested: Any) -> Branch | None:
    if state.is_orphan_root(parent.id):
        # balanced split for detached clusters
        child_count = len(state.children_of(parent.id))
        return Branch.RIGHT if child_count % 2 == 0 else Branch.LEFT
    if parent.id == state.root_id:
        return _coerce(Branch, requested) or Branch.RIGHT
    return parent.branch


@_handles(AddNode)
def _add_node(state: MindMapState, action: AddNode, id_factory: IdFactory) -> MindMapState:
    parent = state.nodes.get(action.parent_id)
    if parent is None:
        logger.debug("AddNode ignored: parent %r not found", action.parent_id)
        return state

    branch = _resolve_branch(state, parent, action.branch)
    direction = -1 if branch is Branch.LEFT else 1

    siblings = [n for n in state.children_of(parent.id) if n.branch is branch]
    if siblings:
        lowest = max(siblings, key=lambda n: n.position.y)
        y = lowest.position.y + lowest.dimensions.height + NODE_VERTICAL_SPACING
    else:
        y = parent.position.y

    node = new_node(
        id_factory("node"),
        parent.id,
        action.content if action.content is not None else DEFAULT_CONTENT,
        position=Point(x=parent.position.x + LEVEL_WIDTH * direction, y=y),
        style=parent.style,
        shape=parent.shape,
        branch=branch,
    )
    connection = Connection(id=id_factory("conn"), from_id=parent.id, to_id=node.id)
    return _replace_nodes(
        state,
        {node.id: node},
        connections=(*state.connections, connection),
        selected_node_ids=(node.id,),
        selected_connection_id=None,
    )


def _delete(state: MindMapState, targets: tuple[str, ...]) -> MindMapState:
    doomed = descendant_closure(state.nodes, (t for t in targets if t != state.root_id))
    if not doomed:
        return state

    nodes = {k: v for k, v in state.nodes.items() if k not in doomed}
    connections = tuple(
        c for c in state.connections if c.from_id not in doomed and c.to_id not in doomed
    )
    selected_connection_id = state.selected_connection_id
    if selected_connection_id is not None and not any(c.id == selected_connection_id for c in connections):
        selected_connection_id = None
    return state.evolve(
        nodes=nodes,
        connections=connections,
        selected_node_ids=tuple(i for i in state.selected_node_ids if i not in doomed),
        selected_connection_id=selected_connection_id,
    )


@_handles(DeleteNode)
def _delete_node(state: MindMapState, action: DeleteNode, id_factory: IdFactory) -> MindMapState:
    return _delete(state, (action.node_id,))


@_handles(DeleteNodes)
def _delete_nodes(state: MindMapState, action: DeleteNodes, id_factory: IdFactory) -> MindMapState:
    return _delete(state, tuple(action.node_ids))


@_handles(UpdateNodePosition)
def _update_position(state: MindMapState, action: UpdateNodePosition, id_factory: IdFactory) -> MindMapState:
    node = state.nodes.get(action.node_id)
    if node is None or node.position == action.position:
        return state
    return _replace_nodes(state, {node.id: replace(node, position=action.position)})


@_handles(UpdateNodeContent)
def _update_content(state: MindMapState, action: UpdateNodeContent, id_factory: IdFactory) -> MindMapState:
    node = state.nodes.get(action.node_id)
    if node is None or node.content == action.content:
        return state
    changes = {"name": action.content} if node.id == state.root_id else {}
    return _replace_nodes(state, {node.id: replace(node, content=action.content)}, **changes)


def _restyle(style: dict[str, Any] | None) -> Callable[[Node], Node]:
    def change(node: Node) -> Node:
        merged = node.style.merged(**(style or {}))
        return node if merged is node.style else replace(node, style=merged)

    return change


@_handles(UpdateNodeStyle)
def _update_style(state: MindMapState, action: UpdateNodeStyle, id_factory: IdFactory) -> MindMapState:
    return _update_many(state, (action.node_id,), _restyle(action.style))


@_handles(UpdateMultipleNodesStyle)
def _update_many_styles(
    state: MindMapState, action: UpdateMultipleNodesStyle, id_factory: IdFactory
) -> MindMapState:
    return _update_many(state, tuple(action.node_ids), _restyle(action.style))


def _reshape(shape: Any) -> Callable[[Node], Node] | None:
    target = _coerce(NodeShape, shape)
    if target is None:
        return None
    return lambda node: node if node.shape is target else replace(node, shape=target)


@_handles(UpdateNodeShape)
def _update_shape(state: MindMapState, action: UpdateNodeShape, id_factory: IdFactory) -> MindMapState:
    change = _reshape(action.shape)
    return state if change is None else _update_many(state, (action.node_id,), change)


@_handles(UpdateMultipleNodesShape)
def _update_many_shapes(
    state: MindMapState, action: UpdateMultipleNodesShape, id_factory: IdFactory
) -> MindMapState:
    change = _reshape(action.shape)
    return state if change is None else _update_many(state, tuple(action.node_ids), change)


@_handles(UpdateNodeDetails)
def _update_details(state: MindMapState, action: UpdateNodeDetails, id_factory: IdFactory) -> MindMapState:
    def change(node: Node) -> Node:
        note = node.note if action.note is None else action.note
        link = node.link if action.link is None else action.link
        if note == node.note and link == node.link:
            return node
        return replace(node, note=note, link=link)

    return _update_many(state, (action.node_id,), change)


@_handles(ToggleCollapse)
def _toggle_collapse(state: MindMapState, action: ToggleCollapse, id_factory: IdFactory) -> MindMapState:
    node = state.nodes.get(action.node_id)
    if node is None or node.id == state.root_id:
        return state
    return _replace_nodes(state, {node.id: replace(node, is_collapsed=not node.is_collapsed)})


@_handles(ToggleRootBranchCollapse)
def _toggle_root_branch(
    state: MindMapState, action: ToggleRootBranchCollapse, id_factory: IdFactory
) -> MindMapState:
    root = state.nodes.get(state.root_id)
    branch = _coerce(Branch, action.branch)
    if root is None or branch is None:
        return state
    if branch is Branch.LEFT:
        updated = replace(root, is_left_collapsed=not root.is_left_collapsed)
    else:
        updated = replace(root, is_right_collapsed=not root.is_right_collapsed)
    return _replace_nodes(state, {root.id: updated})


# === Selection ===


@_handles(SetSelectedNodes)
def _select_nodes(state: MindMapState, action: SetSelectedNodes, id_factory: IdFactory) -> MindMapState:
    ids = tuple(dict.fromkeys(i for i in action.node_ids if i in state.nodes))
    if ids == state.selected_node_ids and state.selected_connection_id is None:
        return state
    return state.evolve(selected_node_ids=ids, selected_connection_id=None)


@_handles(SetSelectedConnection)
def _select_connection(
    state: MindMapState, action: SetSelectedConnection, id_factory: IdFactory
) -> MindMapState:
    connection_id = action.connection_id
    if connection_id is not None and not any(c.id == connection_id for c in state.connections):
        return state
    if connection_id == state.selected_connection_id and not state.selected_node_ids:
        return state
    return state.evolve(selected_connection_id=connection_id, selected_node_ids=())


# === Layout ===


@_handles(AutoLayout)
def _auto_layout(state: MindMapState, action: AutoLayout, id_factory: IdFactory) -> MindMapState:
    positions = auto_layout(state.nodes, state.root_id)
    updates = {
        node_id: replace(state.nodes[node_id], position=position)
        for node_id, position in positions.items()
        if state.nodes[node_id].position != position
    }
    return _replace_nodes(state, updates)


# === Connections ===


@_handles(AddConnection)
def _add_connection(state: MindMapState, action: AddConnection, id_factory: IdFactory) -> MindMapState:
    from_id, to_id = action.from_id, action.to_id
    if from_id == to_id:
        return state

    # the endpoint already anchored in the main tree stays the parent
    if not is_in_main_tree(state, from_id) and is_in_main_tree(state, to_id):
        from_id, to_id = to_id, from_id

    parent = state.nodes.get(from_id)
    child = state.nodes.get(to_id)
    if parent is None or child is None:
        logger.debug("AddConnection ignored: %r or %r not found", from_id, to_id)
        return state
    if to_id == state.root_id:
        logger.debug("AddConnection ignored: the primary root cannot become a child")
        return state
    if is_ancestor(state.nodes, to_id, from_id):
        logger.debug("AddConnection ignored: %r is an ancestor of %r", to_id, from_id)
        return state

    if from_id == state.root_id:
        branch = Branch.LEFT if child.position.x < parent.position.x else Branch.RIGHT
    else:
        branch = parent.branch

    if child.parent_id == from_id and child.branch is branch:
        return state

    nodes = dict(state.nodes)
    nodes[to_id] = replace(child, parent_id=from_id, branch=branch)
    propagate_branch(nodes, to_id, branch)

    replaced = {c.id for c in state.connections if c.to_id == to_id}
    connections = tuple(c for c in state.connections if c.id not in replaced)
    connection = Connection(id=id_factory("conn"), from_id=from_id, to_id=to_id)
    selected = state.selected_connection_id
    return state.evolve(
        nodes=nodes,
        connections=(*connections, connection),
        selected_connection_id=None if selected in replaced else selected,
    )


@_handles(DeleteConnection)
def _delete_connection(state: MindMapState, action: DeleteConnection, id_factory: IdFactory) -> MindMapState:
    target = next((c for c in state.connections if c.id == action.connection_id), None)
    if target is None:
        return state

    connections = tuple(c for c in state.connections if c.id != target.id)
    updates = {}
    child = state.nodes.get(target.to_id)
    if child is not None:
        updates[child.id] = replace(child, parent_id=None, branch=None)
    return _replace_nodes(state, updates, connections=connections, selected_connection_id=None)
