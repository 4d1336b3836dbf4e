"""Tree traversal and invariant checks over a mind map state.

Every walk here is bounded (by node count or a seen-set) so that
corrupted or cyclic stored data never loops forever.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import replace

import networkx as nx

from mindweave.exceptions import InvariantViolationError
from mindweave.model.types import Branch, Connection, MindMapState, Node


def children_index(nodes: Mapping[str, Node]) -> dict[str, list[str]]:
    """Map parent id -> child ids, preserving insertion order."""
    index: dict[str, list[str]] = {}
    for node in nodes.values():
        if node.parent_id is not None:
            index.setdefault(node.parent_id, []).append(node.id)
    return index


def is_in_main_tree(state: MindMapState, node_id: str) -> bool:
    """True if walking up from ``node_id`` reaches the primary root."""
    current: str | None = node_id
    budget = len(state.nodes)
    while current is not None and budget > 0:
        if current == state.root_id:
            return True
        node = state.nodes.get(current)
        if node is None or node.parent_id is None:
            return False
        current = node.parent_id
        budget -= 1
    return False


def is_ancestor(nodes: Mapping[str, Node], ancestor_id: str, node_id: str) -> bool:
    """True if ``ancestor_id`` is ``node_id`` or lies on its parent chain."""
    current: str | None = node_id
    budget = len(nodes) + 1
    while current is not None and budget > 0:
        if current == ancestor_id:
            return True
        node = nodes.get(current)
        current = node.parent_id if node else None
        budget -= 1
    return False


def descendant_closure(nodes: Mapping[str, Node], roots: Iterable[str]) -> set[str]:
    """Breadth-first closure of ``roots`` and everything below them.

    Ids in ``roots`` that are not in ``nodes`` are skipped.
    """
    index = children_index(nodes)
    closure: set[str] = set()
    queue = deque(r for r in roots if r in nodes)
    while queue:
        current = queue.popleft()
        if current in closure:
            continue
        closure.add(current)
        queue.extend(index.get(current, ()))
    return closure


def propagate_branch(nodes: dict[str, Node], node_id: str, branch: Branch | None) -> None:
    """Set ``branch`` on every descendant of ``node_id`` in place.

    ``nodes`` must be a fresh copy owned by the caller. Uses a worklist so
    deep trees never hit the recursion limit.
    """
    index = children_index(nodes)
    seen = {node_id}
    stack = list(index.get(node_id, ()))
    while stack:
        child_id = stack.pop()
        if child_id in seen:
            continue
        seen.add(child_id)
        child = nodes[child_id]
        if child.branch is not branch:
            nodes[child_id] = replace(child, branch=branch)
        stack.extend(index.get(child_id, ()))


def connections_by_child(connections: Iterable[Connection]) -> dict[str, Connection]:
    """Map child id -> the connection that parents it.

    When several connections name the same child, the last one wins.
    """
    return {conn.to_id: conn for conn in connections}


def sync_parents(state: MindMapState) -> MindMapState:
    """Re-derive ``parent_id`` and ``branch`` from the connection list.

    Connections are the authoritative record of the tree. Connections that
    touch missing nodes or point into the primary root are dropped, and so
    are all but the last connection into any one child. A loop of parent
    links loses the connection that closes it, which leaves the node it
    pointed into as an orphan root.

    Returns:
        ``state`` itself when it is already consistent.
    """
    valid = [
        c
        for c in state.connections
        if c.from_id in state.nodes and c.to_id in state.nodes and c.to_id != state.root_id
    ]
    winners = connections_by_child(valid)
    _break_cycles(winners)
    connections = tuple(c for c in valid if winners.get(c.to_id) is c)

    nodes = dict(state.nodes)
    changed = connections != state.connections
    for node_id, node in state.nodes.items():
        conn = winners.get(node_id)
        parent_id = conn.from_id if conn is not None else None
        if node.parent_id != parent_id or (parent_id is None and node.branch is not None):
            nodes[node_id] = replace(node, parent_id=parent_id, branch=node.branch if parent_id else None)
            changed = True

    for node_id, branch in derive_branches(nodes, state.root_id).items():
        if nodes[node_id].branch is not branch:
            nodes[node_id] = replace(nodes[node_id], branch=branch)
            changed = True
    if not changed:
        return state
    return state.evolve(nodes=nodes, connections=connections)


def _break_cycles(winners: dict[str, Connection]) -> None:
    """Remove, in place, the entry that closes each loop of parent links."""
    settled: set[str] = set()
    for start in list(winners):
        path: set[str] = set()
        current = start
        while current in winners and current not in settled:
            if current in path:
                del winners[current]
                break
            path.add(current)
            current = winners[current].from_id
        settled |= path


def derive_branches(
    nodes: Mapping[str, Node],
    root_id: str,
) -> dict[str, Branch]:
    """Recompute the branch of every node below the primary root.

    Children of the primary root keep their stored branch (the side they were
    attached to, right if unknown). Everything below inherits. Nodes outside
    the main tree are absent from the result.
    """
    index = children_index(nodes)
    branches: dict[str, Branch] = {}
    seen = {root_id}
    queue: deque[str] = deque()
    for child_id in index.get(root_id, ()):
        branches[child_id] = nodes[child_id].branch or Branch.RIGHT
        queue.append(child_id)
    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        for child_id in index.get(current, ()):
            branches[child_id] = branches[current]
            queue.append(child_id)
    return branches


def to_nx_graph(state: MindMapState) -> nx.DiGraph:
    """Project the state onto a NetworkX DiGraph (edges from connections).

    Node attributes: ``content``, ``branch``, ``primary`` (True for root_id).
    Edge attributes: ``id`` (connection id).
    """
    G = nx.DiGraph()
    for node in state.nodes.values():
        G.add_node(
            node.id,
            content=node.content,
            branch=node.branch.value if node.branch else None,
            primary=node.id == state.root_id,
        )
    for conn in state.connections:
        G.add_edge(conn.from_id, conn.to_id, id=conn.id)
    return G


def check_invariants(state: MindMapState) -> list[str]:
    """Returns list of issues (empty = valid)."""
    issues: list[str] = []

    root = state.nodes.get(state.root_id)
    if root is None:
        issues.append(f"Root '{state.root_id}' does not exist")
        return issues
    if root.parent_id is not None:
        issues.append(f"Root '{state.root_id}' has parent '{root.parent_id}'")

    G = to_nx_graph(state)
    missing = [n for n in G.nodes if n not in state.nodes]
    if missing:
        issues.append(f"Connections reference missing nodes: {sorted(missing)}")
    try:
        cycle = nx.find_cycle(G)
        issues.append(f"Parent links form a cycle: {[edge[0] for edge in cycle]}")
    except nx.NetworkXNoCycle:
        pass

    issues.extend(_check_connections(state))
    issues.extend(_check_branches(state))

    if state.selected_node_ids and state.selected_connection_id is not None:
        issues.append("Both nodes and a connection are selected")
    return issues


def _check_connections(state: MindMapState) -> list[str]:
    """parent_id and the connection list must agree one-to-one."""
    issues = []
    incoming: dict[str, list[Connection]] = {}
    for conn in state.connections:
        incoming.setdefault(conn.to_id, []).append(conn)

    for node in state.nodes.values():
        conns = incoming.get(node.id, [])
        if node.parent_id is None:
            if conns:
                issues.append(f"Node '{node.id}' has no parent but {len(conns)} incoming connection(s)")
            continue
        matching = [c for c in conns if c.from_id == node.parent_id]
        if len(matching) != 1 or len(conns) != 1:
            issues.append(
                f"Node '{node.id}' has parent '{node.parent_id}' but "
                f"{len(matching)} matching of {len(conns)} incoming connection(s)"
            )
    return issues


def _check_branches(state: MindMapState) -> list[str]:
    """Main-tree nodes follow their parent chain; orphan roots have no branch.

    Nodes below an orphan root are not checked: detaching keeps their last
    branch and new children of an orphan root alternate sides.
    """
    issues = []
    expected = derive_branches(state.nodes, state.root_id)
    for node_id, node in state.nodes.items():
        if node_id == state.root_id:
            continue
        if node.parent_id is None:
            if node.branch is not None:
                issues.append(f"Orphan root '{node_id}' has branch {node.branch.value}")
            continue
        if node.parent_id == state.root_id:
            if node.branch is None:
                issues.append(f"Root child '{node_id}' has no branch")
            continue
        if node_id in expected and node.branch is not expected[node_id]:
            issues.append(
                f"Node '{node_id}' has branch {node.branch} but its parent chain implies {expected[node_id]}"
            )
    return issues


def assert_invariants(state: MindMapState) -> None:
    """Raise InvariantViolationError if ``check_invariants`` reports issues."""
    issues = check_invariants(state)
    if issues:
        raise InvariantViolationError(issues)
