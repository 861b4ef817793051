"""Config file loading and auto-discovery for fieldpatch.

``FIELDPATCH_CONFIG`` names a config file explicitly. Without it,
``fieldpatch.yaml`` is searched for in the current directory and its
parents. Recognised keys:

- ``id_field``: identifier field used to build lookup keys (default ``_id``)
- ``clone``: edit a copy of documents instead of mutating them in place
- ``log_level``: structlog filtering level (``debug`` .. ``critical``)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from fieldpatch.log import LOG_LEVELS
from fieldpatch.tracker import DEFAULT_ID_FIELD, is_placeholder_name

CONFIG_FILENAME = "fieldpatch.yaml"
CONFIG_ENV_VAR = "FIELDPATCH_CONFIG"


@dataclass(frozen=True)
class FieldPatchConfig:
    """Parsed fieldpatch project configuration."""

    config_path: Path | None = None
    id_field: str = DEFAULT_ID_FIELD
    clone: bool = False
    log_level: str = "warning"


def find_config(start: Path | None = None) -> Path | None:
    """Return the first ``fieldpatch.yaml`` between *start* and the root."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: str | Path | None = None,
    *,
    auto_discover: bool = True,
) -> FieldPatchConfig:
    """Load a fieldpatch config file.

    Resolution order: explicit *path*, then ``$FIELDPATCH_CONFIG``, then
    auto-discovery, then an all-defaults ``FieldPatchConfig``. A named
    file (argument or environment) that does not exist is an error.
    """
    named = path if path is not None else os.environ.get(CONFIG_ENV_VAR) or None

    if named is not None:
        config_path = Path(named).resolve()
        if not config_path.is_file():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
        return _parse_config(config_path)

    discovered = find_config() if auto_discover else None
    if discovered is None:
        return FieldPatchConfig()
    return _parse_config(discovered)


def _parse_config(config_path: Path) -> FieldPatchConfig:
    """Read a YAML config file and validate its values."""
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}

    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        raise ValueError(msg)

    return FieldPatchConfig(
        config_path=config_path,
        id_field=_id_field(data, config_path),
        clone=_clone(data, config_path),
        log_level=_log_level(data, config_path),
    )


def _id_field(data: dict[str, Any], config_path: Path) -> str:
    value = data.get("id_field", DEFAULT_ID_FIELD)
    if not isinstance(value, str) or is_placeholder_name(value):
        msg = f"id_field must be a non-empty string in {config_path}, got {value!r}"
        raise ValueError(msg)
    return value


def _clone(data: dict[str, Any], config_path: Path) -> bool:
    value = data.get("clone", False)
    if not isinstance(value, bool):
        msg = f"clone must be true or false in {config_path}, got {value!r}"
        raise ValueError(msg)
    return value


def _log_level(data: dict[str, Any], config_path: Path) -> str:
    value = str(data.get("log_level", "warning")).lower()
    if value not in LOG_LEVELS:
        msg = (
            f"Unknown log_level {value!r} in {config_path}. "
            f"Available: {', '.join(LOG_LEVELS)}"
        )
        raise ValueError(msg)
    return value
