"""Tests for model types and graph helpers."""

from dataclasses import replace

import networkx as nx
import pytest

from mindweave import (
    Branch,
    Connection,
    DeleteConnection,
    InvariantViolationError,
    MindMapState,
    NodeStyle,
    new_map,
)
from mindweave.model.graph import (
    assert_invariants,
    check_invariants,
    children_index,
    derive_branches,
    descendant_closure,
    is_ancestor,
    is_in_main_tree,
    propagate_branch,
    sync_parents,
    to_nx_graph,
)
from mindweave.model.types import Node, generate_id, new_node


def _detach(state, apply, child_id):
    return apply(state, DeleteConnection(connection_id=state.connection_to(child_id).id))


class TestTypes:
    def test_new_map_defaults(self):
        state = new_map()
        assert len(state.nodes) == 1
        assert state.root.content == "Central Idea"
        assert state.root.parent_id is None
        assert state.root.branch is None
        assert state.name == "Central Idea"
        assert state.id is None
        assert state.root_id.startswith("node_")

    def test_generate_id_is_unique(self):
        assert generate_id("node") != generate_id("node")

    def test_branch_sign(self):
        assert Branch.RIGHT.sign == 1
        assert Branch.LEFT.sign == -1

    def test_style_merge_ignores_unknown_and_none(self):
        style = NodeStyle()
        assert style.merged(font="serif", text_color=None) is style

    def test_style_merge_clamps_opacity(self):
        assert NodeStyle().merged(background_opacity=-2).background_opacity == 0.0

    def test_orphan_root_queries(self, tree, apply, find):
        a = find(tree, "A")
        state = _detach(tree, apply, a.id)
        assert state.is_orphan_root(a.id)
        assert not state.is_orphan_root(state.root_id)
        assert state.is_primary_root(state.root_id)
        assert state.nodes[a.id].is_tree_root

    def test_children_of_keeps_insertion_order(self, tree, find):
        children = tree.children_of(tree.root_id)
        assert [c.content for c in children] == ["A", "C"]


class TestTraversal:
    """Walks over parent links."""

    def test_children_index(self, tree, find):
        a, b = find(tree, "A"), find(tree, "B")
        index = children_index(tree.nodes)
        assert index[a.id] == [b.id]
        assert b.id not in index

    def test_ancestor(self, tree, find):
        a, b, c = find(tree, "A"), find(tree, "B"), find(tree, "C")
        assert is_ancestor(tree.nodes, a.id, b.id)
        assert is_ancestor(tree.nodes, tree.root_id, b.id)
        assert is_ancestor(tree.nodes, b.id, b.id)
        assert not is_ancestor(tree.nodes, c.id, b.id)
        assert not is_ancestor(tree.nodes, b.id, a.id)

    def test_ancestor_terminates_on_cycle(self):
        nodes = {
            "x": Node(id="x", parent_id="y"),
            "y": Node(id="y", parent_id="x"),
        }
        assert not is_ancestor(nodes, "z", "x")

    def test_main_tree_membership(self, tree, apply, find):
        a, b = find(tree, "A"), find(tree, "B")
        assert is_in_main_tree(tree, b.id)
        state = _detach(tree, apply, a.id)
        assert not is_in_main_tree(state, a.id)
        assert not is_in_main_tree(state, b.id)
        assert not is_in_main_tree(state, "ghost")

    def test_descendant_closure(self, tree, find):
        a, b = find(tree, "A"), find(tree, "B")
        assert descendant_closure(tree.nodes, [a.id, "ghost"]) == {a.id, b.id}
        assert descendant_closure(tree.nodes, [tree.root_id]) == set(tree.nodes)

    def test_propagate_branch_copies_nodes(self, tree, find):
        a, b = find(tree, "A"), find(tree, "B")
        nodes = dict(tree.nodes)
        propagate_branch(nodes, a.id, Branch.LEFT)
        assert nodes[b.id].branch is Branch.LEFT
        assert nodes[a.id] is tree.nodes[a.id]
        assert tree.nodes[b.id].branch is Branch.RIGHT

    def test_derive_branches(self, tree, find):
        branches = derive_branches(tree.nodes, tree.root_id)
        assert branches == {
            find(tree, "A").id: Branch.RIGHT,
            find(tree, "B").id: Branch.RIGHT,
            find(tree, "C").id: Branch.LEFT,
        }


class TestSyncParents:
    """Connections decide parent links."""

    def test_consistent_state_is_returned_as_is(self, tree):
        assert sync_parents(tree) is tree

    def test_parent_links_rebuilt_from_connections(self):
        nodes = {
            "r": new_node("r", content="Root"),
            "a": new_node("a", content="A", branch=Branch.LEFT),
            "b": new_node("b", content="B"),
        }
        state = MindMapState(
            nodes=nodes,
            connections=(Connection("c1", "r", "a"), Connection("c2", "a", "b")),
            root_id="r",
        )
        synced = sync_parents(state)
        assert synced.nodes["a"].parent_id == "r"
        assert synced.nodes["b"].parent_id == "a"
        assert synced.nodes["b"].branch is Branch.LEFT
        assert check_invariants(synced) == []

    def test_dangling_and_duplicate_connections_dropped(self):
        nodes = {
            "r": new_node("r"),
            "a": new_node("a"),
            "b": new_node("b"),
        }
        state = MindMapState(
            nodes=nodes,
            connections=(
                Connection("c1", "r", "a"),
                Connection("c2", "r", "b"),
                Connection("c3", "a", "b"),
                Connection("c4", "ghost", "a"),
                Connection("c5", "a", "r"),
            ),
            root_id="r",
        )
        synced = sync_parents(state)
        assert [c.id for c in synced.connections] == ["c1", "c3"]
        assert synced.nodes["b"].parent_id == "a"
        assert synced.nodes["a"].branch is Branch.RIGHT
        assert check_invariants(synced) == []

    def test_connection_loop_is_broken(self):
        nodes = {
            "r": new_node("r"),
            "a": new_node("a", parent_id="b", branch=Branch.RIGHT),
            "b": new_node("b", parent_id="a", branch=Branch.RIGHT),
        }
        state = MindMapState(
            nodes=nodes,
            connections=(Connection("c1", "b", "a"), Connection("c2", "a", "b")),
            root_id="r",
        )
        synced = sync_parents(state)
        assert [c.id for c in synced.connections] == ["c2"]
        assert synced.nodes["a"].parent_id is None
        assert synced.nodes["a"].branch is None
        assert synced.nodes["b"].parent_id == "a"
        assert check_invariants(synced) == []

    def test_self_loop_and_loop_below_root(self):
        nodes = {k: new_node(k) for k in ("r", "a", "b", "c", "d")}
        state = MindMapState(
            nodes=nodes,
            connections=(
                Connection("c1", "r", "a"),
                Connection("c2", "a", "b"),
                Connection("c3", "d", "c"),
                Connection("c4", "c", "d"),
                Connection("c5", "b", "b"),
            ),
            root_id="r",
        )
        synced = sync_parents(state)
        assert synced.nodes["b"].parent_id is None
        assert synced.nodes["a"].parent_id == "r"
        assert sum(synced.nodes[k].parent_id is None for k in ("c", "d")) == 1
        assert check_invariants(synced) == []

    def test_stale_parent_cleared(self):
        nodes = {"r": new_node("r"), "a": new_node("a", parent_id="r", branch=Branch.RIGHT)}
        state = MindMapState(nodes=nodes, connections=(), root_id="r")
        synced = sync_parents(state)
        assert synced.nodes["a"].parent_id is None
        assert synced.nodes["a"].branch is None


class TestInvariants:
    def test_sample_tree_is_valid(self, tree):
        assert check_invariants(tree) == []
        assert_invariants(tree)

    def test_missing_root(self):
        state = MindMapState(nodes={}, connections=(), root_id="r")
        assert check_invariants(state) == ["Root 'r' does not exist"]

    def test_parent_without_connection(self, tree, find):
        b = find(tree, "B")
        state = tree.evolve(connections=tuple(c for c in tree.connections if c.to_id != b.id))
        issues = check_invariants(state)
        assert any(b.id in issue for issue in issues)

    def test_cycle_detected(self):
        nodes = {
            "r": new_node("r"),
            "a": new_node("a", parent_id="b", branch=Branch.RIGHT),
            "b": new_node("b", parent_id="a", branch=Branch.RIGHT),
        }
        state = MindMapState(
            nodes=nodes,
            connections=(Connection("c1", "a", "b"), Connection("c2", "b", "a")),
            root_id="r",
        )
        assert any("cycle" in issue for issue in check_invariants(state))

    def test_wrong_branch_detected(self, tree, find):
        b = find(tree, "B")
        nodes = dict(tree.nodes)
        nodes[b.id] = replace(b, branch=Branch.LEFT)
        issues = check_invariants(tree.evolve(nodes=nodes))
        assert any("parent chain implies" in issue for issue in issues)

    def test_double_selection_detected(self, tree, find):
        state = tree.evolve(selected_connection_id=tree.connections[0].id)
        assert "Both nodes and a connection are selected" in check_invariants(state)

    def test_assert_raises_with_issues(self):
        state = MindMapState(nodes={}, connections=(), root_id="r")
        with pytest.raises(InvariantViolationError) as exc_info:
            assert_invariants(state)
        assert exc_info.value.issues == ["Root 'r' does not exist"]


class TestNxProjection:
    def test_graph_shape(self, tree, find):
        G = to_nx_graph(tree)
        assert set(G.nodes) == set(tree.nodes)
        assert G.number_of_edges() == len(tree.connections)
        assert G.nodes[tree.root_id]["primary"] is True
        assert G.nodes[find(tree, "C").id]["branch"] == "left"
        assert nx.is_arborescence(G)

    def test_detached_tree_is_a_forest(self, tree, apply, find):
        state = _detach(tree, apply, find(tree, "A").id)
        G = to_nx_graph(state)
        assert nx.is_forest(G)
        assert nx.number_weakly_connected_components(G) == 2
