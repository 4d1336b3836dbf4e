"""Tests for InMemoryMapStore and SqliteMapStore.

Both stores run the same contract tests through the parametrized ``store``
fixture; SQLite-only behavior is tested separately.
"""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from mindweave import (
    AddNode,
    InMemoryMapStore,
    MapNotFoundError,
    SetMapId,
    SqliteMapStore,
    StoreError,
    UpdateNodeContent,
)
from mindweave.persistence._schema import SCHEMA_VERSION, detect_schema_version


class FakeClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Fresh store of each kind with a deterministic clock."""
    if request.param == "memory":
        s = InMemoryMapStore(clock=FakeClock())
    else:
        s = SqliteMapStore(str(tmp_path / "maps.db"), clock=FakeClock())
    yield s
    s.close()


class TestStoreContract:
    def test_save_assigns_id(self, store, tree):
        map_id = store.save(tree, owner="alice")
        assert map_id.startswith("map_")
        loaded = store.load(map_id)
        assert loaded.id == map_id
        assert loaded.nodes == tree.nodes

    def test_save_existing_id_updates(self, store, tree, apply):
        state = apply(tree, SetMapId(id="m1"))
        assert store.save(state, owner="alice") == "m1"
        renamed = apply(state, UpdateNodeContent(node_id=state.root_id, content="Renamed"))
        assert store.save(renamed, owner="alice") == "m1"

        assert store.load("m1").name == "Renamed"
        (summary,) = store.list_maps("alice")
        assert summary.name == "Renamed"
        assert summary.created_at < summary.updated_at

    def test_load_is_a_copy(self, store, tree):
        map_id = store.save(tree, owner="alice")
        loaded = store.load(map_id)
        assert loaded.root is not tree.root
        assert loaded.selected_node_ids == ()

    def test_missing_map(self, store):
        with pytest.raises(MapNotFoundError) as exc_info:
            store.load("nope")
        assert exc_info.value.map_id == "nope"
        with pytest.raises(MapNotFoundError):
            store.delete("nope")

    def test_list_newest_first(self, store, tree, empty, apply):
        first = store.save(empty, owner="alice")
        second = store.save(tree, owner="alice")
        store.save(apply(empty, SetMapId(id="bob-map")), owner="bob")

        summaries = store.list_maps("alice")
        assert [s.id for s in summaries] == [second, first]
        assert summaries[0].node_count == 4
        assert summaries[0].owner == "alice"

        everyone = store.list_maps()
        assert [s.id for s in everyone][0] == "bob-map"
        assert len(everyone) == 3
        assert len(store.list_maps(limit=1)) == 1

    def test_delete(self, store, tree):
        map_id = store.save(tree, owner="alice")
        store.delete(map_id)
        assert store.list_maps() == []
        with pytest.raises(MapNotFoundError):
            store.load(map_id)

    def test_summary_to_dict(self, store, tree):
        store.save(tree, owner="alice")
        data = store.list_maps()[0].to_dict()
        assert data["node_count"] == 4
        assert data["updated_at"].startswith("2024-01-01T00:0")

    def test_context_manager(self, tree):
        with InMemoryMapStore() as store:
            assert store.load(store.save(tree, owner="x")).name == tree.name


class TestSqliteStore:
    def test_persists_across_connections(self, tmp_path, tree, apply, find):
        path = str(tmp_path / "maps.db")
        with SqliteMapStore(path) as store:
            map_id = store.save(apply(tree, AddNode(parent_id=find(tree, "C").id, content="D")), owner="a")
        with SqliteMapStore(path) as store:
            loaded = store.load(map_id)
        assert find(loaded, "D").parent_id == find(tree, "C").id

    def test_schema_version_recorded(self, tmp_path, tree):
        path = str(tmp_path / "maps.db")
        with SqliteMapStore(path) as store:
            store.save(tree, owner="a")
        conn = sqlite3.connect(path)
        try:
            assert detect_schema_version(conn) == SCHEMA_VERSION
        finally:
            conn.close()

    def test_newer_schema_is_refused(self, tmp_path):
        path = str(tmp_path / "future.db")
        conn = sqlite3.connect(path)
        conn.execute("CREATE TABLE _schema_version (version INTEGER NOT NULL)")
        conn.execute("INSERT INTO _schema_version (version) VALUES (99)")
        conn.commit()
        conn.close()

        store = SqliteMapStore(path)
        with pytest.raises(StoreError, match="schema v99"):
            store.list_maps()

    def test_unopenable_path(self, tmp_path):
        store = SqliteMapStore(str(tmp_path / "missing-dir" / "maps.db"))
        with pytest.raises(StoreError, match="Cannot open map store"):
            store.load("x")

    def test_close_is_idempotent(self, tmp_path):
        store = SqliteMapStore(str(tmp_path / "maps.db"))
        store.list_maps()
        store.close()
        store.close()
