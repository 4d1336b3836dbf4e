"""Map CLI commands: ls, new, show, apply, layout, check, export, import, rm."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from mindweave.actions import AutoLayout, action_from_dict
from mindweave.cli._format import (
    format_datetime,
    print_json,
    print_lines,
    print_table,
    tree_lines,
)
from mindweave.cli._store import fail, open_store
from mindweave.config import load_config
from mindweave.editor import MindMapEditor
from mindweave.exceptions import MindweaveError
from mindweave.model.graph import check_invariants
from mindweave.model.types import new_map
from mindweave.persistence.document import deserialize, serialize
from mindweave.visibility import visible_node_ids

app = typer.Typer(help="Create, inspect and edit saved mind maps.")

# Common options
DbOption = Annotated[str | None, typer.Option("--db", help="Database path (default from [tool.mindweave])")]
OwnerOption = Annotated[str | None, typer.Option("--owner", help="Owner id (default from config or login name)")]
JsonFlag = Annotated[bool, typer.Option("--json", help="Output as JSON")]
OutputOption = Annotated[str | None, typer.Option("--output", help="Write JSON to file")]
MapId = Annotated[str, typer.Argument(help="Map id")]


def _db(db: str | None) -> str:
    return db or load_config().db


def _owner(owner: str | None) -> str:
    return owner or load_config().resolved_owner()


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: Could not read JSON from '{path}': {e}")
        raise typer.Exit(1) from e


@app.command("ls")
def maps_ls(
    db: DbOption = None,
    owner: OwnerOption = None,
    everyone: Annotated[bool, typer.Option("--all", help="List maps of every owner")] = False,
    limit: Annotated[int, typer.Option("--limit", help="Max results")] = 20,
    as_json: JsonFlag = False,
    output: OutputOption = None,
):
    """List saved maps, most recently updated first."""
    try:
        with open_store(_db(db)) as store:
            summaries = store.list_maps(None if everyone else _owner(owner), limit=limit)
    except MindweaveError as e:
        raise fail(e) from e

    if as_json:
        print_json("maps.ls", {"maps": [s.to_dict() for s in summaries]}, output)
        return

    if not summaries:
        print("No maps found.")
        print("  To create one, use: mindweave maps new 'My Idea'")
        return

    headers = ["Id", "Name", "Owner", "Nodes", "Updated"]
    rows = [
        [s.id, s.name, s.owner, str(s.node_count), format_datetime(s.updated_at)]
        for s in summaries
    ]
    print(f"\n  Maps ({len(summaries)}):\n")
    print_lines(print_table(headers, rows))


@app.command("new")
def maps_new(
    name: Annotated[str, typer.Argument(help="Map name (root content)")],
    db: DbOption = None,
    owner: OwnerOption = None,
):
    """Create an empty map and print its id."""
    try:
        with open_store(_db(db)) as store:
            map_id = store.save(new_map(name), owner=_owner(owner))
    except MindweaveError as e:
        raise fail(e) from e
    print(map_id)


@app.command("show")
def maps_show(
    map_id: MapId,
    db: DbOption = None,
    show_all: Annotated[bool, typer.Option("--all", help="Include collapsed nodes")] = False,
    as_json: JsonFlag = False,
    output: OutputOption = None,
):
    """Print a map as an indented tree (visible nodes only by default)."""
    try:
        with open_store(_db(db)) as store:
            state = store.load(map_id)
    except MindweaveError as e:
        raise fail(e) from e

    if as_json:
        print_json("maps.show", serialize(state), output)
        return

    visible = None if show_all else set(visible_node_ids(state))
    print(f"\n  {state.name} ({len(state.nodes)} nodes, {len(state.connections)} connections)\n")
    print_lines(["  " + line for line in tree_lines(state, visible)])


@app.command("apply")
def maps_apply(
    map_id: MapId,
    actions_file: Annotated[str, typer.Argument(help="JSON file with a list of actions")],
    db: DbOption = None,
    owner: OwnerOption = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every action")] = False,
    show_ignored: Annotated[bool, typer.Option("--show-ignored", help="Also log actions that changed nothing")] = False,
):
    """Replay an action file against a saved map and save the result."""
    raw = _read_json(actions_file)
    if isinstance(raw, dict):
        raw = raw.get("actions", [])
    if not isinstance(raw, list):
        print("Error: Action file must contain a list of actions")
        raise typer.Exit(1)

    processors = []
    if verbose or show_ignored:
        from mindweave.events.rich_log import RichEventLog

        processors.append(RichEventLog(show_ignored=show_ignored))

    config = load_config()
    try:
        actions = [action_from_dict(item) for item in raw]
        with open_store(_db(db)) as store:
            original = store.load(map_id)
            editor = MindMapEditor(original, history_limit=config.history_limit, processors=processors)
            changed = 0
            for action in actions:
                before = editor.state
                if editor.dispatch(action) is not before:
                    changed += 1
            editor.close()
            if editor.state is not original:
                store.save(editor.state.evolve(id=map_id), owner=_owner(owner))
    except MindweaveError as e:
        raise fail(e) from e

    print(f"Applied {len(actions)} action(s), {changed} changed the map.")


@app.command("layout")
def maps_layout(
    map_id: MapId,
    db: DbOption = None,
    owner: OwnerOption = None,
):
    """Run auto-layout on a saved map."""
    try:
        with open_store(_db(db)) as store:
            editor = MindMapEditor(store.load(map_id))
            before = editor.state
            after = editor.dispatch(AutoLayout())
            if after is before:
                print("Layout unchanged.")
                return
            store.save(after, owner=_owner(owner))
    except MindweaveError as e:
        raise fail(e) from e
    print(f"Laid out {len(after.nodes)} node(s).")


@app.command("check")
def maps_check(
    map_id: MapId,
    db: DbOption = None,
):
    """Verify the structural invariants of a saved map."""
    try:
        with open_store(_db(db)) as store:
            state = store.load(map_id)
    except MindweaveError as e:
        raise fail(e) from e

    issues = check_invariants(state)
    if not issues:
        print(f"OK: '{state.name}' is consistent ({len(state.nodes)} nodes).")
        return
    print(f"Found {len(issues)} issue(s) in '{state.name}':")
    for issue in issues:
        print(f"  -> {issue}")
    raise typer.Exit(1)


@app.command("export")
def maps_export(
    map_id: MapId,
    db: DbOption = None,
    output: Annotated[str | None, typer.Option("--output", help="Write the document to a file")] = None,
):
    """Print a map's stored document as JSON."""
    try:
        with open_store(_db(db)) as store:
            document = serialize(store.load(map_id))
    except MindweaveError as e:
        raise fail(e) from e

    text = json.dumps(document, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"Wrote map {map_id} to {output}")
    else:
        print(text)


@app.command("import")
def maps_import(
    path: Annotated[str, typer.Argument(help="Map document (JSON)")],
    db: DbOption = None,
    owner: OwnerOption = None,
):
    """Save a map document into the store and print its id."""
    document = _read_json(path)
    try:
        state = deserialize(document)
        with open_store(_db(db)) as store:
            map_id = store.save(state, owner=_owner(owner))
    except MindweaveError as e:
        raise fail(e) from e
    print(map_id)


@app.command("rm")
def maps_rm(
    map_id: MapId,
    db: DbOption = None,
):
    """Delete a saved map."""
    try:
        with open_store(_db(db)) as store:
            store.delete(map_id)
    except MindweaveError as e:
        raise fail(e) from e
    print(f"Deleted map {map_id}")
