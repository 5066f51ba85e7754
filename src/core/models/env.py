"""
Environment wiring model — how a rendered container variable is sourced.

Variables are never inlined for enterprise settings; they point at a
key in a ConfigMap or Secret. ``EnvBinding`` describes where that
pointer should lead, ``EnvVarRef`` is the resolved pointer.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from src.core.models.rules import Condition


class EnvSource(str, Enum):
    """Kind of object an env var is sourced from (matches the pod spec field)."""

    CONFIG_MAP = "configMapKeyRef"
    SECRET = "secretKeyRef"


class EnvVarRef(BaseModel):
    """An indirect reference: object ``name`` and ``key`` within it."""

    source: EnvSource
    name: str
    key: str

    def to_dict(self) -> dict:
        return {"source": self.source.value, "name": self.name, "key": self.key}

    def __str__(self) -> str:
        return f"{self.source.value}({self.name}/{self.key})"


class EnvBinding(BaseModel):
    """Expected wiring for one variable.

    Config-map variables live in the release-scoped env config map under
    their own name. Secret variables read the secret name and key from
    the configuration (``name_from`` / ``key_from``), falling back to
    ``default_key`` when the key setting is blank.
    """

    var: str
    source: EnvSource = EnvSource.CONFIG_MAP
    name_from: str = ""
    key_from: str = ""
    default_key: str = ""
    workloads: list[str] = Field(default_factory=list)  # empty → every workload
    when: list[Condition] = Field(default_factory=list)

    def applies_to(self, workload: str) -> bool:
        return not self.workloads or workload in self.workloads


class WorkloadSpec(BaseModel):
    """A rendered workload whose first container carries the wiring."""

    kind: str
    name: str                     # may contain {release}
    init_image_from: str = ""     # config key overriding the readiness image
    init_image_default: str = ""


class EnvWiring(BaseModel):
    """Expected env sourcing for one chart, loaded from the data catalog."""

    name: str
    config_map: str = "{release}-env"
    workloads: dict[str, WorkloadSpec] = Field(default_factory=dict)
    bindings: list[EnvBinding] = Field(default_factory=list)

    def workload(self, component: str) -> WorkloadSpec:
        try:
            return self.workloads[component]
        except KeyError:
            known = ", ".join(sorted(self.workloads)) or "none"
            raise KeyError(f"Unknown workload '{component}' (known: {known})") from None
