"""Shared fixtures: deterministic ids and a small sample tree.

Sample tree (contents shown)::

    C (left) <- Root -> A (right) -> B
"""

import itertools

import pytest

from mindweave import AddNode, Branch, new_map, reduce


def node_by_content(state, content):
    """The single node whose content is ``content``."""
    matches = [n for n in state.nodes.values() if n.content == content]
    assert len(matches) == 1, f"expected one node named {content!r}, got {len(matches)}"
    return matches[0]


@pytest.fixture
def ids():
    """Id factory producing node_1, conn_2, node_3, ..."""
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}_{next(counter)}"


@pytest.fixture
def empty(ids):
    """A fresh single-root map."""
    return new_map(id_factory=ids)


@pytest.fixture
def apply(ids):
    """Apply a sequence of actions with the deterministic id factory."""

    def _apply(state, *actions):
        for action in actions:
            state = reduce(state, action, id_factory=ids)
        return state

    return _apply


@pytest.fixture
def tree(empty, apply):
    """Root with A (right) -> B, and C (left)."""
    root_id = empty.root_id
    state = apply(empty, AddNode(parent_id=root_id, content="A", branch=Branch.RIGHT))
    a = node_by_content(state, "A")
    state = apply(
        state,
        AddNode(parent_id=a.id, content="B"),
        AddNode(parent_id=root_id, content="C", branch=Branch.LEFT),
    )
    return state


@pytest.fixture
def find():
    """Look up a node by its content."""
    return node_by_content
