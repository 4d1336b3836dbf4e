"""Project-level configuration from pyproject.toml.

Reads the [tool.mindweave] section to provide the default map database,
owner and undo depth for the CLI. ``MINDWEAVE_DB`` and ``MINDWEAVE_OWNER``
override the file.
"""

from __future__ import annotations

import getpass
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_DB = "mindweave.db"


def _default_owner() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "local"


@dataclass(frozen=True)
class MindweaveConfig:
    """Configuration from [tool.mindweave] in pyproject.toml."""

    db: str = DEFAULT_DB
    owner: str = ""
    history_limit: int | None = None

    def resolved_owner(self) -> str:
        return self.owner or _default_owner()


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _from_pyproject(start: Path | None) -> MindweaveConfig:
    path = find_pyproject(start)
    if path is None:
        return MindweaveConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        try:
            import tomli as tomllib
        except ImportError:
            return MindweaveConfig()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("mindweave", {})
    if not section:
        return MindweaveConfig()

    db = section.get("db", DEFAULT_DB)
    if db != ":memory:" and not Path(db).is_absolute():
        db = str(path.parent / db)
    limit = section.get("history_limit")
    return MindweaveConfig(
        db=db,
        owner=section.get("owner", ""),
        history_limit=int(limit) if limit is not None else None,
    )


def load_config(start: Path | None = None) -> MindweaveConfig:
    """Load [tool.mindweave] from the nearest pyproject.toml, then apply env overrides.

    Returns default config if no pyproject.toml or no [tool.mindweave] section.
    """
    config = _from_pyproject(start)
    if db := os.environ.get("MINDWEAVE_DB"):
        config = replace(config, db=db)
    if owner := os.environ.get("MINDWEAVE_OWNER"):
        config = replace(config, owner=owner)
    return config
