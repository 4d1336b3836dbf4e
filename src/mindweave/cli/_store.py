"""Store access helpers for CLI commands."""

from __future__ import annotations

import typer

from mindweave.exceptions import MindweaveError
from mindweave.persistence.sqlite import SqliteMapStore


def open_store(db: str) -> SqliteMapStore:
    """Open the SQLite map store at ``db``."""
    return SqliteMapStore(db)


def fail(error: MindweaveError) -> typer.Exit:
    """Print ``error`` and return the Exit to raise."""
    print(f"Error: {error.message}")
    return typer.Exit(1)
