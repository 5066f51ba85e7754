"""
Validation result — Valid, or Invalid with ordered violation messages.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of evaluating a rule set against a configuration.

    ``messages`` keeps rule-declaration order. An empty tuple means valid.
    """

    messages: tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls()

    @classmethod
    def invalid(cls, messages: list[str] | tuple[str, ...]) -> ValidationResult:
        return cls(messages=tuple(messages))

    @property
    def valid(self) -> bool:
        return not self.messages

    def __bool__(self) -> bool:
        return self.valid

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "violations": list(self.messages),
        }
