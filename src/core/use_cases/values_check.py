"""
Values check use case — resolve chart values and validate them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.core.config.loader import ConfigError, resolve_values
from src.core.config.rules_loader import resolve_rule_set
from src.core.models.result import ValidationResult
from src.core.services.values_validate import validate

logger = logging.getLogger(__name__)


@dataclass
class ValuesCheckResult:
    """Result of values validation."""

    rule_set: str = ""
    rule_count: int = 0
    config: dict[str, Any] = field(default_factory=dict)
    validation: ValidationResult | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def violations(self) -> list[str]:
        return list(self.validation.messages) if self.validation else []

    @property
    def valid(self) -> bool:
        return not self.errors and self.validation is not None and self.validation.valid

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "rule_set": self.rule_set,
            "rule_count": self.rule_count,
            "violations": self.violations,
            "errors": self.errors,
        }


def check_values(
    chart_dir: Path | None = None,
    values_files: list[Path] | None = None,
    set_values: list[str] | None = None,
    *,
    rules_path: Path | None = None,
    ruleset_name: str | None = None,
    config: dict[str, Any] | None = None,
) -> ValuesCheckResult:
    """Resolve values and run the rule set over them.

    Args:
        chart_dir: Chart whose values.yaml supplies defaults.
        values_files: Extra values files, applied in order.
        set_values: ``key=value`` overrides, applied last.
        rules_path: Explicit rules file.
        ruleset_name: Built-in rule set name.
        config: Already-resolved flat configuration; skips value loading.

    Returns:
        ValuesCheckResult with violations and any configuration errors.
    """
    result = ValuesCheckResult()

    try:
        rule_set = resolve_rule_set(rules_path, ruleset_name)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.rule_set = rule_set.name
    result.rule_count = len(rule_set.rules)

    if config is None:
        try:
            config = resolve_values(chart_dir, values_files or [], set_values or [])
        except ConfigError as e:
            result.errors.append(str(e))
            return result

    result.config = config
    result.validation = validate(config, rule_set)

    if result.validation.valid:
        logger.info("Values valid against '%s'", rule_set.name)
    else:
        logger.info(
            "Values invalid against '%s': %d violation(s)",
            rule_set.name, len(result.validation.messages),
        )
    return result
