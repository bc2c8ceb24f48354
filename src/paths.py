"""Central definitions for filesystem paths used across the application."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

CONFIG_DIR = Path(
    os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
) / "tailwatch"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


def resolve_watch_path(path: Union[str, Path]) -> Path:
    """Return the absolute form of ``path`` without requiring it to exist."""

    return Path(path).expanduser().resolve(strict=False)


__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "resolve_watch_path",
]
