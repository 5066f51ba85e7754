"""
Domain models — Pydantic types for values validation.

All models are re-exported here for convenient access:

    from src.core.models import Condition, Rule, RuleGroup, RuleSet, ValidationResult
"""

from src.core.models.env import EnvBinding, EnvSource, EnvVarRef, EnvWiring, WorkloadSpec
from src.core.models.result import ValidationResult
from src.core.models.rules import (
    DEFAULT_MESSAGE,
    Condition,
    Rule,
    RuleGroup,
    RuleSet,
    is_blank,
)

__all__ = [
    # rules.py
    "DEFAULT_MESSAGE",
    "Condition",
    # env.py
    "EnvBinding",
    "EnvSource",
    "EnvVarRef",
    "EnvWiring",
    "Rule",
    "RuleGroup",
    "RuleSet",
    # result.py
    "ValidationResult",
    "WorkloadSpec",
    "is_blank",
]
