"""
Rule model — declarative conditional requirements over chart values.

A rule names a target key that must be set whenever its guards hold.
Guards are evaluated in order, ancestor conditions first, so a rule for
a leaf setting never fires while an outer feature is disabled.

Rule sets are usually authored as nested groups (see ``RuleGroup``)
and compiled into a flat, ordered ``RuleSet``.
"""

from __future__ import annotations

import string
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_MESSAGE = "You must set `{key}` when {when}"

ConditionOp = Literal["equals", "not_equals", "one_of", "present", "configured", "truthy"]

# Shorthand keys accepted in YAML: {key: x, equals: y}
_SHORTHAND_OPS = ("equals", "not_equals", "one_of", "present", "configured", "truthy")

_FALSY_STRINGS = frozenset({"false", "0", "no", "off"})


def is_blank(value: Any) -> bool:
    """Whether a value counts as unset (None or exactly the empty string)."""
    return value is None or (isinstance(value, str) and value == "")


class Condition(BaseModel):
    """A single guard over the configuration.

    ``holds`` never raises — a missing key simply fails the comparison.
    """

    key: str
    op: ConditionOp = "present"
    value: Any = None

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or "op" in data:
            return data
        found = [op for op in _SHORTHAND_OPS if op in data]
        if len(found) > 1:
            raise ValueError(f"condition on '{data.get('key')}' has several operators: {found}")
        if not found:
            return data
        op = found[0]
        expanded = {k: v for k, v in data.items() if k != op}
        expanded["op"] = op
        if op in ("equals", "not_equals", "one_of"):
            expanded["value"] = data[op]
        return expanded

    @field_validator("key")
    @classmethod
    def _key_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("condition key must not be empty")
        return v

    def holds(self, config: Mapping[str, Any]) -> bool:
        """Evaluate this condition against a flat configuration."""
        if self.op == "configured":
            return _is_configured(config, self.key)

        actual = config.get(self.key)
        if self.op == "present":
            return not is_blank(actual)
        if self.op == "truthy":
            if is_blank(actual) or actual is False:
                return False
            if isinstance(actual, str):
                return actual.strip().lower() not in _FALSY_STRINGS
            return bool(actual)
        if self.op == "equals":
            return self.key in config and actual == self.value
        if self.op == "not_equals":
            return actual != self.value
        if self.op == "one_of":
            choices = self.value if isinstance(self.value, (list, tuple, set, frozenset)) else [self.value]
            return self.key in config and actual in choices
        return False

    def describe(self) -> str:
        """Human-readable form, e.g. ``global.edition == 'enterprise'``."""
        if self.op == "equals":
            return f"{self.key} == {self.value!r}"
        if self.op == "not_equals":
            return f"{self.key} != {self.value!r}"
        if self.op == "one_of":
            return f"{self.key} in {list(self.value or [])!r}"
        return f"{self.key} is {self.op}"


def _is_configured(config: Mapping[str, Any], key: str) -> bool:
    """True when ``key`` or anything beneath it was supplied."""
    if key in config:
        value = config[key]
        if value is None:
            return False
        # Nested (unflattened) sections count only when non-empty
        if isinstance(value, Mapping):
            return bool(value)
        return True
    prefix = key + "."
    return any(k.startswith(prefix) for k in config)


class Rule(BaseModel):
    """One conditional requirement: ``key`` must be set when ``guards`` hold."""

    key: str
    guards: list[Condition] = Field(default_factory=list)
    when: str = ""
    message: str = DEFAULT_MESSAGE
    name: str = ""

    @field_validator("message")
    @classmethod
    def _known_placeholders(cls, v: str) -> str:
        fields = {name for _, name, _, _ in string.Formatter().parse(v) if name is not None}
        unknown = fields - {"key", "when"}
        if unknown:
            raise ValueError(f"unknown placeholder(s) in message: {sorted(unknown)}")
        return v

    def enabled(self, config: Mapping[str, Any]) -> bool:
        """Conjunction of guards, short-circuiting at the first false ancestor."""
        return all(guard.holds(config) for guard in self.guards)

    def render_message(self) -> str:
        return self.message.format(key=self.key, when=self.when)


class RuleGroup(BaseModel):
    """Authoring form of a rule set — nested feature gates.

    Children inherit their ancestors' guards and, when they do not set
    ``describe`` themselves, the nearest ancestor's description.
    """

    name: str = ""
    when: list[Condition] = Field(default_factory=list)
    describe: str = ""
    message: str = ""
    require: list[str] = Field(default_factory=list)
    groups: list[RuleGroup] = Field(default_factory=list)

    @field_validator("when", mode="before")
    @classmethod
    def _single_condition(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return [v]
        return v

    def compile(
        self,
        guards: tuple[Condition, ...] = (),
        when: str = "",
        message: str = DEFAULT_MESSAGE,
    ) -> list[Rule]:
        """Flatten this group depth-first: own requirements, then children."""
        guards = guards + tuple(self.when)
        when = self.describe or when
        message = self.message or message

        rules = [
            Rule(
                key=key,
                guards=list(guards),
                when=when,
                message=message,
                name=f"{self.name}:{key}" if self.name else key,
            )
            for key in self.require
        ]
        for child in self.groups:
            rules.extend(child.compile(guards, when, message))
        return rules


class RuleSet(BaseModel):
    """Ordered rules; order is evaluation and reporting order."""

    name: str = "custom"
    description: str = ""
    rules: list[Rule] = Field(default_factory=list)

    @classmethod
    def from_groups(
        cls,
        groups: list[RuleGroup],
        *,
        name: str = "custom",
        description: str = "",
        rules: list[Rule] | None = None,
    ) -> RuleSet:
        compiled: list[Rule] = list(rules or [])
        for group in groups:
            compiled.extend(group.compile())
        return cls(name=name, description=description, rules=compiled)

    @property
    def target_keys(self) -> list[str]:
        """Target keys in declaration order (duplicates kept)."""
        return [r.key for r in self.rules]


RuleGroup.model_rebuild()
