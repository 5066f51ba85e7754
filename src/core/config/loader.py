"""
Values loader — resolves chart values into a flat configuration.

This is the defaulting stage that runs before validation. It reads the
chart's ``values.yaml``, layers user values files and ``--set``
assignments on top (in that order, Helm-style), and flattens the
result into dotted key paths:

    {"global": {"edition": "enterprise"}}  →  {"global.edition": "enterprise"}
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Default chart values filename
CHART_VALUES_FILE = "values.yaml"

_INT_RE = re.compile(r"^-?(0|[1-9][0-9]*)$")
_ESCAPE_RE = re.compile(r"\\(.)")


class ConfigError(Exception):
    """Raised when values or rule configuration is invalid or missing."""


def load_values_file(path: Path) -> dict:
    """Load one values file.

    An empty file yields ``{}``.

    Raises:
        ConfigError: If the file is missing, unreadable, or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Values file not found: {path}")

    logger.debug("Loading values from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _parse_scalar(raw: str) -> Any:
    """Type a ``--set`` value the way Helm does for plain scalars."""
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw == "null":
        return None
    if _INT_RE.match(raw):
        return int(raw)
    return raw


def _split_unescaped(text: str, sep: str, *, braces: bool = False) -> list[str]:
    """Split on ``sep`` unless it is backslash-escaped (or inside ``{...}``).

    Escape sequences are kept as-is; ``_unescape`` removes them later.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if braces and ch == "{":
            depth += 1
        elif braces and ch == "}" and depth:
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _unescape(text: str) -> str:
    return _ESCAPE_RE.sub(r"\1", text)


def _parse_set_value(raw: str) -> Any:
    """A single value; ``{a,b}`` is a list, everything else a scalar."""
    if raw.startswith("{") and raw.endswith("}"):
        inner = raw[1:-1]
        if not inner:
            return []
        return [_parse_scalar(_unescape(item)) for item in _split_unescaped(inner, ",")]
    return _parse_scalar(_unescape(raw))


def parse_set_values(assignments: Iterable[str]) -> dict:
    """Turn ``["a.b=c", "a.d="]`` into ``{"a": {"b": "c", "d": ""}}``.

    Like ``helm --set``, one entry may hold several comma-separated
    assignments (``a=1,b=2``); ``\\,`` is a literal comma and ``{x,y}``
    is a list. A value runs from the first ``=`` to the next separator.

    Raises:
        ConfigError: On an assignment without ``=`` or with an empty path segment.
    """
    result: dict = {}
    for entry in assignments:
        for assignment in _split_unescaped(entry, ",", braces=True):
            if not assignment:
                continue
            if "=" not in assignment:
                raise ConfigError(f"Invalid --set value '{assignment}': expected key=value")
            path, raw = assignment.split("=", 1)
            parts = [_unescape(p) for p in _split_unescaped(path.strip(), ".")]
            if not all(parts):
                raise ConfigError(f"Invalid --set key '{path}'")

            node = result
            for part in parts[:-1]:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = {}
                    node[part] = child
                node = child
            node[parts[-1]] = _parse_set_value(raw)
    return result


def _without_nulls(value: Any) -> Any:
    """Deep copy of ``value`` with ``None`` entries dropped from mappings."""
    if isinstance(value, Mapping):
        return {k: _without_nulls(v) for k, v in value.items() if v is not None}
    return copy.deepcopy(value)


def merge_values(base: Mapping, override: Mapping) -> dict:
    """Deep-merge ``override`` onto ``base`` and return a new dict.

    Mappings merge recursively, other values replace. An override of
    ``None`` removes the key, matching Helm's null semantics; nulls
    inside a newly added subtree are dropped the same way.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_values(merged[key], value)
        else:
            merged[key] = _without_nulls(value)
    return merged


def flatten_values(values: Mapping, prefix: str = "") -> dict[str, Any]:
    """Flatten nested values into dotted paths.

    Empty mappings produce no key; lists and scalars are leaves.
    """
    flat: dict[str, Any] = {}
    for key, value in values.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_values(value, path))
        else:
            flat[path] = value
    return flat


def resolve_values(
    chart_dir: Path | None = None,
    values_files: Iterable[Path] = (),
    set_values: Iterable[str] = (),
) -> dict[str, Any]:
    """Merge chart defaults, values files and ``--set`` into a flat config.

    Raises:
        ConfigError: If any source cannot be loaded or parsed.
    """
    merged: dict = {}

    if chart_dir is not None:
        defaults = chart_dir / CHART_VALUES_FILE
        if defaults.is_file():
            merged = merge_values({}, load_values_file(defaults))
        else:
            logger.warning("No %s in %s, validating without chart defaults", CHART_VALUES_FILE, chart_dir)

    for path in values_files:
        merged = merge_values(merged, load_values_file(Path(path)))

    overrides = parse_set_values(set_values)
    merged = merge_values(merged, overrides)

    config = flatten_values(merged)
    logger.info("Resolved %d value keys", len(config))
    return config
