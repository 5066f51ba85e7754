"""
Central data registry for built-in rule sets and wiring catalogs.

Loads YAML catalogs from ``src/core/data/rulesets/`` and
``src/core/data/wiring/`` on first access and caches them for the
process lifetime.  Everything downstream (CLI, Web) reads from this
single source of truth.

Usage::

    from src.core.data import get_registry

    registry = get_registry()
    registry.ruleset_names          # ["airbyte-enterprise"]
    raw = registry.ruleset("airbyte-enterprise")   # dict, not yet validated
"""

from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent


def _load_catalog(subdir: str) -> dict[str, dict]:
    """Load every ``*.yml`` under a data subdirectory, keyed by file stem."""
    catalog: dict[str, dict] = {}
    directory = _DATA_DIR / subdir
    if not directory.is_dir():
        logger.warning("Data directory not found: %s", directory)
        return catalog

    for path in sorted(directory.glob("*.yml")):
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            logger.warning("Catalog file %s is not a mapping, skipping", path)
            continue
        catalog[path.stem] = data
    return catalog


class DataRegistry:
    """Registry for the shipped YAML catalogs.

    Each property lazily loads its directory on first access and caches
    the result for the lifetime of the instance.
    """

    @cached_property
    def rulesets(self) -> dict[str, dict]:
        """Built-in rule sets, raw YAML keyed by name."""
        data = _load_catalog("rulesets")
        logger.debug("Loaded %d built-in rule sets", len(data))
        return data

    @cached_property
    def wirings(self) -> dict[str, dict]:
        """Env wiring catalogs, raw YAML keyed by chart name."""
        data = _load_catalog("wiring")
        logger.debug("Loaded %d env wiring catalogs", len(data))
        return data

    @property
    def ruleset_names(self) -> list[str]:
        return sorted(self.rulesets)

    def ruleset(self, name: str) -> dict:
        """Raw rule set by name.

        Raises:
            KeyError: If no built-in rule set has that name.
        """
        try:
            return self.rulesets[name]
        except KeyError:
            raise KeyError(
                f"Unknown rule set '{name}' (available: {', '.join(self.ruleset_names) or 'none'})"
            ) from None

    def wiring(self, name: str) -> dict:
        """Raw wiring catalog by chart name.

        Raises:
            KeyError: If no catalog has that name.
        """
        try:
            return self.wirings[name]
        except KeyError:
            raise KeyError(
                f"Unknown wiring catalog '{name}' (available: {', '.join(sorted(self.wirings)) or 'none'})"
            ) from None


# ── Module-level singleton ───────────────────────────────────────

_registry: DataRegistry | None = None


def get_registry() -> DataRegistry:
    """Return the process-level DataRegistry singleton."""
    global _registry  # noqa: PLW0603
    if _registry is None:
        _registry = DataRegistry()
    return _registry
