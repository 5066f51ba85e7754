"""
Rules loader — loads rule sets from YAML files or the built-in catalog.

A rule file may use nested ``groups`` (feature gates with inherited
conditions), a flat ``rules`` list, or both::

    name: my-chart
    groups:
      - when: {key: global.edition, equals: enterprise}
        describe: "`global.edition` is 'enterprise'"
        require: [global.enterprise.secretName]
        groups: [...]
    rules:
      - key: image.tag
        guards: [{key: image.pinned, truthy: true}]
        when: pinning images

Groups are compiled after flat rules, in file order.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.core.config.loader import ConfigError
from src.core.models.rules import Rule, RuleGroup, RuleSet

logger = logging.getLogger(__name__)

# Rules file looked up from the working directory upwards
RULES_FILE_NAMES = ("values-rules.yml", "values-rules.yaml")

DEFAULT_RULESET = "airbyte-enterprise"

RULES_ENV_VAR = "VG_RULES"


def rule_set_from_dict(data: dict, *, source: str = "<dict>") -> RuleSet:
    """Build a RuleSet from parsed YAML.

    Raises:
        ConfigError: If the structure does not validate.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {source}, got {type(data).__name__}")

    try:
        rules = [Rule.model_validate(r) for r in data.get("rules") or []]
        groups = [RuleGroup.model_validate(g) for g in data.get("groups") or []]
    except ValidationError as e:
        raise ConfigError(f"Invalid rule definition in {source}: {e}") from e
    except TypeError as e:
        raise ConfigError(f"Invalid rule definition in {source}: {e}") from e

    rule_set = RuleSet.from_groups(
        groups,
        name=str(data.get("name") or "custom"),
        description=str(data.get("description") or ""),
        rules=rules,
    )
    if not rule_set.rules:
        logger.warning("Rule set '%s' from %s defines no rules", rule_set.name, source)
    return rule_set


def load_rule_set(path: Path) -> RuleSet:
    """Load and validate a rule file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Rules file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    rule_set = rule_set_from_dict(data, source=str(path))
    logger.info("Loaded rule set '%s' with %d rules from %s", rule_set.name, len(rule_set.rules), path)
    return rule_set


def builtin_rule_set_names() -> list[str]:
    from src.core.data import get_registry

    return get_registry().ruleset_names


def builtin_rule_set(name: str = DEFAULT_RULESET) -> RuleSet:
    """Compile a shipped rule set.

    Raises:
        ConfigError: If no built-in rule set has that name.
    """
    from src.core.data import get_registry

    try:
        data = get_registry().ruleset(name)
    except KeyError as e:
        raise ConfigError(str(e.args[0])) from e
    return rule_set_from_dict(data, source=f"builtin:{name}")


def find_rules_file(start_dir: Path | None = None) -> Path | None:
    """Search for values-rules.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to the rules file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        for name in RULES_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def resolve_rule_set(
    path: Path | None = None,
    name: str | None = None,
    start_dir: Path | None = None,
) -> RuleSet:
    """Pick the rule set for a run.

    Precedence: explicit file > named built-in > ``VG_RULES`` >
    discovered values-rules.yml > the default built-in.
    """
    if path is not None:
        return load_rule_set(path)
    if name:
        return builtin_rule_set(name)

    env_path = os.environ.get(RULES_ENV_VAR)
    if env_path:
        return load_rule_set(Path(env_path))

    found = find_rules_file(start_dir)
    if found is not None:
        logger.debug("Using discovered rules file %s", found)
        return load_rule_set(found)

    return builtin_rule_set(DEFAULT_RULESET)
