"""Values validation — conditional requirement checks.

Runs a ``RuleSet`` against a fully resolved, flattened configuration.
Defaults must already be merged in; nothing here fills gaps.

Every rule is evaluated independently and every violation is reported,
in declaration order, so callers can choose between surfacing the whole
list or just the first message.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.core.models.result import ValidationResult
from src.core.models.rules import Rule, RuleSet, is_blank

logger = logging.getLogger(__name__)


def is_absent(config: Mapping[str, Any], key: str) -> bool:
    """A key is absent when missing, None, or exactly ``""``.

    Whitespace-only strings are values like any other.
    """
    return is_blank(config.get(key))


def enabled_rules(config: Mapping[str, Any], rule_set: RuleSet) -> list[Rule]:
    """Rules whose guards all hold for ``config``."""
    return [rule for rule in rule_set.rules if rule.enabled(config)]


def validate(config: Mapping[str, Any], rule_set: RuleSet) -> ValidationResult:
    """Evaluate every rule and collect violation messages.

    A rule fires when its guards hold and its target key is absent.
    """
    violations: list[str] = []

    for rule in rule_set.rules:
        if not rule.enabled(config):
            continue
        if is_absent(config, rule.key):
            violations.append(rule.render_message())

    if violations:
        logger.debug(
            "Rule set '%s': %d violation(s) over %d rules",
            rule_set.name, len(violations), len(rule_set.rules),
        )
        return ValidationResult.invalid(violations)

    logger.debug("Rule set '%s': valid (%d rules)", rule_set.name, len(rule_set.rules))
    return ValidationResult.ok()
