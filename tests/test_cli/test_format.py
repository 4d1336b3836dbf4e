"""Tests for CLI formatting utilities."""

from datetime import datetime

from mindweave import DeleteConnection, ToggleCollapse
from mindweave.cli._format import (
    format_datetime,
    json_envelope,
    print_lines,
    print_table,
    tree_lines,
)


class TestFormatDatetime:
    def test_none(self):
        assert format_datetime(None) == "—"

    def test_minutes_precision(self):
        assert format_datetime(datetime(2024, 3, 5, 14, 7, 59)) == "2024-03-05 14:07"


class TestPrintTable:
    def test_empty(self):
        assert print_table(["Id"], []) == []

    def test_alignment(self):
        lines = print_table(["Id", "Nodes"], [["a", "5"], ["long-id", "120"]])
        assert lines[0] == "  Id       Nodes"
        assert lines[2] == "  a            5"
        assert lines[3] == "  long-id    120"


class TestPrintLines:
    def test_truncates(self, capsys):
        print_lines([str(i) for i in range(5)], max_lines=3)
        out = capsys.readouterr().out
        assert "0\n1\n2\n" in out
        assert "# ... 2 more lines" in out


class TestJsonEnvelope:
    def test_envelope_fields(self):
        envelope = json_envelope("maps.ls", {"maps": []})
        assert envelope["schema_version"] == 1
        assert envelope["command"] == "maps.ls"
        assert envelope["data"] == {"maps": []}
        assert "generated_at" in envelope


class TestTreeLines:
    def test_sample_tree(self, tree):
        assert tree_lines(tree) == [
            "Central Idea",
            "  - A  [right]",
            "    - B",
            "  - C  [left]",
        ]

    def test_collapsed_marker(self, tree, apply, find):
        state = apply(tree, ToggleCollapse(node_id=find(tree, "A").id))
        assert "  - A  [right, collapsed]" in tree_lines(state)

    def test_detached_section(self, tree, apply, find):
        a = find(tree, "A")
        state = apply(tree, DeleteConnection(connection_id=tree.connection_to(a.id).id))
        lines = tree_lines(state)
        assert lines[-3:] == ["(detached)", "A", "  - B"]

    def test_visible_filter(self, tree, find):
        lines = tree_lines(tree, visible={tree.root_id, find(tree, "C").id})
        assert lines == ["Central Idea", "  - C  [left]"]
