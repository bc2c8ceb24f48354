"""Loading and merging of tailwatch configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from errors import ConfigError
from models import TailConfig
from paths import CONFIG_FILE

logger = logging.getLogger(__name__)

_KNOWN_KEYS = (
    "poll_interval",
    "backend",
    "on_truncate",
    "on_read_error",
    "log_level",
    "log_file",
)


def _parse_float(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{label} must be a number: {exc}") from exc


def build_config(raw: Mapping[str, Any]) -> TailConfig:
    """
    Turn a raw mapping (parsed YAML, CLI overrides) into a validated TailConfig.
    Keys with a ``None`` value fall back to the defaults.
    """
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in _KNOWN_KEYS:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        if value is None:
            continue
        values[key] = value

    if "poll_interval" in values:
        values["poll_interval"] = _parse_float(values["poll_interval"], "poll_interval")
    for key in ("backend", "on_truncate", "on_read_error"):
        if key in values:
            values[key] = str(values[key]).strip().lower()
    if "log_level" in values:
        values["log_level"] = str(values["log_level"]).strip().upper()
    if "log_file" in values:
        values["log_file"] = Path(values["log_file"]).expanduser()

    cfg = TailConfig(**values)
    cfg.validate()
    return cfg


def load_config(
    path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> TailConfig:
    """
    Read the YAML config at ``path`` (the default location if omitted), apply
    ``overrides`` on top and return the validated result.

    A missing file at the default location is not an error; a missing file
    that was asked for explicitly is.
    """
    explicit = path is not None
    path = Path(path) if explicit else CONFIG_FILE

    raw: Dict[str, Any] = {}
    if path.is_file():
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Could not read config file {path}", underlying=exc) from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping, got {type(loaded).__name__}"
            )
        raw.update(loaded)
        logger.debug("Loaded config from %s", path)
    elif explicit:
        raise ConfigError(f"Config file not found: {path}")

    if overrides:
        raw.update({k: v for k, v in overrides.items() if v is not None})

    return build_config(raw)
