"""Env reference resolver — expected indirect env vars per workload.

Given a resolved configuration, computes which ConfigMap/Secret key
each container variable should point at. The table itself lives in
``src/core/data/wiring/<chart>.yml``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.core.models.env import EnvBinding, EnvSource, EnvVarRef, EnvWiring
from src.core.models.rules import is_blank

logger = logging.getLogger(__name__)

DEFAULT_RELEASE = "airbyte"
DEFAULT_WIRING = "airbyte"


def load_wiring(name: str = DEFAULT_WIRING) -> EnvWiring:
    """Validate a wiring catalog from the data registry.

    Raises:
        KeyError: If no catalog has that name.
    """
    from src.core.data import get_registry

    return EnvWiring.model_validate(get_registry().wiring(name))


def resolve_binding(
    binding: EnvBinding,
    config: Mapping[str, Any],
    *,
    config_map: str,
) -> EnvVarRef:
    """Resolve one binding to the object name and key it should reference."""
    if binding.source == EnvSource.CONFIG_MAP:
        return EnvVarRef(source=EnvSource.CONFIG_MAP, name=config_map, key=binding.var)

    name = config.get(binding.name_from) if binding.name_from else None
    key = config.get(binding.key_from) if binding.key_from else None
    if is_blank(key):
        key = binding.default_key
    return EnvVarRef(
        source=EnvSource.SECRET,
        name="" if is_blank(name) else str(name),
        key="" if is_blank(key) else str(key),
    )


def expected_env_refs(
    config: Mapping[str, Any],
    component: str,
    release: str = DEFAULT_RELEASE,
    wiring: EnvWiring | None = None,
) -> dict[str, EnvVarRef]:
    """Variables a workload must declare, mapped to their expected references.

    Bindings whose guards do not hold (e.g. OIDC vars without an OIDC
    provider) are left out.

    Raises:
        KeyError: If ``component`` is not a known workload.
    """
    wiring = wiring or load_wiring()
    wiring.workload(component)  # unknown component → KeyError
    config_map = wiring.config_map.format(release=release)

    refs: dict[str, EnvVarRef] = {}
    for binding in wiring.bindings:
        if not binding.applies_to(component):
            continue
        if not all(cond.holds(config) for cond in binding.when):
            continue
        refs[binding.var] = resolve_binding(binding, config, config_map=config_map)

    logger.debug("Expected %d env refs for %s/%s", len(refs), release, component)
    return refs


def expected_readiness_image(
    config: Mapping[str, Any],
    component: str = "keycloak-setup",
    wiring: EnvWiring | None = None,
) -> str:
    """Image of the workload's readiness init container, override first."""
    spec = (wiring or load_wiring()).workload(component)
    if spec.init_image_from:
        override = config.get(spec.init_image_from)
        if not is_blank(override):
            return str(override)
    return spec.init_image_default


def workload_name(component: str, release: str = DEFAULT_RELEASE, wiring: EnvWiring | None = None) -> tuple[str, str]:
    """(kind, name) of a component's rendered workload."""
    spec = (wiring or load_wiring()).workload(component)
    return spec.kind, spec.name.format(release=release)
