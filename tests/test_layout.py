"""Tests for the automatic tree layout."""

import sys

from mindweave import AddNode, AutoLayout, Branch, DeleteConnection, Point, auto_layout
from mindweave.layout import LEVEL_WIDTH, NODE_VERTICAL_SPACING, build_tree, measure
from mindweave.model.types import Dimensions, Node


class TestMeasure:
    def test_leaf_slot_is_height_plus_spacing(self, tree, find):
        shape = build_tree(tree.nodes, find(tree, "B").id)
        assert measure(shape) == 60 + NODE_VERTICAL_SPACING

    def test_parent_spans_its_children(self, tree, apply, find):
        a = find(tree, "A")
        state = apply(tree, AddNode(parent_id=a.id, content="D"), AddNode(parent_id=a.id, content="E"))
        shape = build_tree(state.nodes, a.id)
        assert measure(shape) == 3 * 90
        assert [child.total_height for child in shape.children] == [90, 90, 90]

    def test_tall_node_outweighs_children(self):
        nodes = {
            "p": Node(id="p", dimensions=Dimensions(160, 400)),
            "c": Node(id="c", parent_id="p"),
        }
        assert measure(build_tree(nodes, "p")) == 430


class TestAutoLayout:
    """Both branches are centered on the root."""

    def test_single_root(self, empty):
        positions = auto_layout(empty.nodes, empty.root_id)
        assert positions == {empty.root_id: Point(-80, -30)}

    def test_missing_root(self, empty):
        assert auto_layout(empty.nodes, "ghost") == {}

    def test_sample_tree(self, tree, find):
        positions = auto_layout(tree.nodes, tree.root_id)
        assert positions[tree.root_id] == Point(-80, 15)
        assert positions[find(tree, "A").id] == Point(LEVEL_WIDTH, 15)
        assert positions[find(tree, "B").id] == Point(2 * LEVEL_WIDTH, 15)
        # left nodes hang off the level line by their own width
        assert positions[find(tree, "C").id] == Point(-LEVEL_WIDTH - 160, 15)

    def test_shorter_branch_is_centered(self, tree, apply, find):
        state = apply(tree, AddNode(parent_id=tree.root_id, content="D", branch=Branch.RIGHT))
        positions = auto_layout(state.nodes, state.root_id)

        # right: A(B) and D take 180; left: C takes 90
        assert positions[state.root_id] == Point(-80, 60)
        assert positions[find(state, "A").id].y == 15
        assert positions[find(state, "D").id].y == 105
        assert positions[find(state, "C").id].y == 60

    def test_children_stack_in_insertion_order(self, empty, apply, find):
        root = empty.root_id
        state = apply(
            empty,
            AddNode(parent_id=root, content="one", branch=Branch.RIGHT),
            AddNode(parent_id=root, content="two", branch=Branch.RIGHT),
            AddNode(parent_id=root, content="three", branch=Branch.RIGHT),
        )
        positions = auto_layout(state.nodes, root)
        ys = [positions[find(state, name).id].y for name in ("one", "two", "three")]
        assert ys == sorted(ys)
        assert ys[1] - ys[0] == 90

    def test_only_main_tree_is_placed(self, tree, apply, find):
        a = find(tree, "A")
        state = apply(tree, DeleteConnection(connection_id=tree.connection_to(a.id).id))
        positions = auto_layout(state.nodes, state.root_id)
        assert a.id not in positions
        assert find(state, "B").id not in positions
        assert set(positions) == {state.root_id, find(state, "C").id}

    def test_deep_chain(self, empty, apply):
        state = empty
        parent = empty.root_id
        for _ in range(50):
            state = apply(state, AddNode(parent_id=parent))
            parent = state.selected_node_ids[0]
        positions = auto_layout(state.nodes, state.root_id)
        assert positions[parent].x == 50 * LEVEL_WIDTH
        assert len(positions) == 51

    def test_chain_deeper_than_recursion_limit(self, empty, apply):
        depth = sys.getrecursionlimit() + 200
        state = empty
        parent = empty.root_id
        for _ in range(depth):
            state = apply(state, AddNode(parent_id=parent))
            parent = state.selected_node_ids[0]

        laid_out = apply(state, AutoLayout())
        assert laid_out.nodes[parent].position == Point(depth * LEVEL_WIDTH, 15)
        assert measure(build_tree(state.nodes, state.root_id)) == 90
