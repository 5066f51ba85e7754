"""
Render use case — validate values, then render the chart with helm.

Rendering is refused while validation reports violations; each
violation is surfaced verbatim. After a successful render, the
enterprise workloads can be checked for their env wiring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from src.core.services import env_refs
from src.core.services.k8s_helm import helm_template
from src.core.services.manifest_inspect import (
    find_resource,
    init_container_images,
    parse_manifests,
    verify_env_refs,
)
from src.core.use_cases.values_check import ValuesCheckResult, check_values

logger = logging.getLogger(__name__)

DEFAULT_COMPONENTS = ("keycloak-setup", "server")


@dataclass
class RenderResult:
    """Result of a render (and optional wiring verification)."""

    check: ValuesCheckResult = field(default_factory=ValuesCheckResult)
    rendered: bool = False
    documents: list[dict] = field(default_factory=list)
    error: str | None = None
    problems: list[str] = field(default_factory=list)
    verified: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.check.valid and self.rendered and self.error is None and not self.problems

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "check": self.check.to_dict(),
            "rendered": self.rendered,
            "document_count": len(self.documents),
            "error": self.error,
            "problems": self.problems,
            "verified": self.verified,
        }


def render_chart(
    chart_dir: Path,
    release: str = env_refs.DEFAULT_RELEASE,
    *,
    namespace: str = "",
    values_files: list[Path] | None = None,
    set_values: list[str] | None = None,
    rules_path: Path | None = None,
    ruleset_name: str | None = None,
) -> RenderResult:
    """Validate, then render with ``helm template``.

    Helm is not invoked when validation fails or values cannot be loaded.
    """
    values_files = values_files or []
    set_values = set_values or []

    result = RenderResult()
    result.check = check_values(
        chart_dir, values_files, set_values,
        rules_path=rules_path, ruleset_name=ruleset_name,
    )
    if not result.check.valid:
        logger.info("Skipping render of %s: values did not validate", chart_dir)
        return result

    chart = chart_dir.resolve()
    out = helm_template(
        chart.parent,
        release,
        str(chart),
        namespace=namespace,
        values_files=[str(Path(p).resolve()) for p in values_files],
        set_values=list(set_values),
    )
    if "error" in out:
        result.error = out["error"]
        return result

    try:
        result.documents = parse_manifests(out.get("output", ""))
    except yaml.YAMLError as e:
        result.error = f"Rendered output is not valid YAML: {e}"
        return result

    result.rendered = True
    logger.info("Rendered %d documents for release '%s'", len(result.documents), release)
    return result


def verify_wiring(
    chart_dir: Path,
    release: str = env_refs.DEFAULT_RELEASE,
    *,
    components: tuple[str, ...] | list[str] = DEFAULT_COMPONENTS,
    namespace: str = "",
    values_files: list[Path] | None = None,
    set_values: list[str] | None = None,
    rules_path: Path | None = None,
    ruleset_name: str | None = None,
) -> RenderResult:
    """Render, then check each component's env references and readiness image."""
    result = render_chart(
        chart_dir, release,
        namespace=namespace,
        values_files=values_files,
        set_values=set_values,
        rules_path=rules_path,
        ruleset_name=ruleset_name,
    )
    if not result.rendered:
        return result

    wiring = env_refs.load_wiring()
    config = result.check.config

    for component in components:
        try:
            kind, name = env_refs.workload_name(component, release, wiring)
        except KeyError as e:
            result.problems.append(str(e.args[0]))
            continue

        resource = find_resource(result.documents, kind, name)
        if resource is None:
            result.problems.append(f"{kind}/{name}: not found in rendered output")
            continue

        expected = env_refs.expected_env_refs(config, component, release, wiring)
        result.problems.extend(verify_env_refs(resource, expected))

        want_image = env_refs.expected_readiness_image(config, component, wiring)
        if want_image:
            images = init_container_images(resource)
            if not images:
                result.problems.append(f"{kind}/{name}: no init containers, expected {want_image}")
            elif images[0] != want_image:
                result.problems.append(
                    f"{kind}/{name}: readiness image is {images[0]}, expected {want_image}"
                )

        result.verified.append(f"{kind}/{name}")

    return result
