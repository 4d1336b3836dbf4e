"""Mindweave CLI: manage saved mind maps.

Entry point for the `mindweave` command. Requires ``pip install mindweave[cli]``.

Commands:
    maps ls         List saved maps, newest first
    maps new        Create an empty map
    maps show       Print a map as a tree
    maps apply      Replay an action file against a map
    maps layout     Auto-layout a map
    maps check      Verify structural invariants
    maps export     Print a map document
    maps import     Save a map document
    maps rm         Delete a map
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install mindweave[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all subcommands."""
    _require_typer()

    import typer

    from mindweave.cli.maps import app as maps_app

    app = typer.Typer(
        name="mindweave",
        help="Mind map editing and storage CLI.",
        no_args_is_help=True,
    )
    app.add_typer(maps_app, name="maps")

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
