"""Rendered manifest inspection — env wiring and init container checks.

Works on plain YAML mappings as produced by ``helm template``; no typed
Kubernetes objects are involved.
"""

from __future__ import annotations

import logging

import yaml

from src.core.models.env import EnvSource, EnvVarRef

logger = logging.getLogger(__name__)

# Kinds whose pod template sits at spec.template.spec
_TEMPLATED_KINDS = frozenset({"Deployment", "StatefulSet", "DaemonSet", "ReplicaSet", "Job"})


def parse_manifests(text: str) -> list[dict]:
    """Split rendered YAML into resource dicts.

    Documents without ``kind`` are dropped.

    Raises:
        yaml.YAMLError: If the text is not valid YAML.
    """
    return [
        doc for doc in yaml.safe_load_all(text)
        if doc and isinstance(doc, dict) and "kind" in doc
    ]


def find_resource(docs: list[dict], kind: str, name: str) -> dict | None:
    """First resource with the given kind and metadata.name."""
    for doc in docs:
        if doc.get("kind") == kind and (doc.get("metadata") or {}).get("name") == name:
            return doc
    return None


def pod_spec(resource: dict) -> dict:
    """Pod spec of a workload, or ``{}`` for kinds without one."""
    kind = resource.get("kind", "")
    spec = resource.get("spec") or {}
    if kind == "Pod":
        return spec
    if kind == "CronJob":
        spec = ((spec.get("jobTemplate") or {}).get("spec")) or {}
        return ((spec.get("template") or {}).get("spec")) or {}
    if kind in _TEMPLATED_KINDS:
        return ((spec.get("template") or {}).get("spec")) or {}
    return {}


def env_var_map(container: dict) -> dict[str, dict]:
    """Container env list keyed by variable name."""
    return {e["name"]: e for e in container.get("env") or [] if isinstance(e, dict) and "name" in e}


def env_ref(env_var: dict) -> EnvVarRef | None:
    """The indirect reference of an env var, or None for inline values."""
    value_from = env_var.get("valueFrom") or {}
    for source in EnvSource:
        ref = value_from.get(source.value)
        if isinstance(ref, dict):
            return EnvVarRef(source=source, name=str(ref.get("name", "")), key=str(ref.get("key", "")))
    return None


def verify_env_refs(resource: dict, expected: dict[str, EnvVarRef]) -> list[str]:
    """Compare the first container's env vars with the expected references.

    Returns:
        Human-readable problems; empty when every variable matches.
    """
    kind = resource.get("kind", "?")
    name = (resource.get("metadata") or {}).get("name", "?")
    containers = pod_spec(resource).get("containers") or []
    if not containers:
        return [f"{kind}/{name}: no containers"]

    actual_vars = env_var_map(containers[0])
    problems: list[str] = []
    for var, want in expected.items():
        env_var = actual_vars.get(var)
        if env_var is None:
            problems.append(f"{kind}/{name}: `{var}` should be declared as an environment variable")
            continue
        got = env_ref(env_var)
        if got is None:
            problems.append(f"{kind}/{name}: `{var}` is set inline, expected {want}")
        elif got != want:
            problems.append(f"{kind}/{name}: `{var}` references {got}, expected {want}")

    if problems:
        logger.debug("%s/%s: %d env wiring problem(s)", kind, name, len(problems))
    return problems


def init_container_images(resource: dict) -> list[str]:
    """Images of the workload's init containers, in order."""
    return [c.get("image", "") for c in pod_spec(resource).get("initContainers") or []]
