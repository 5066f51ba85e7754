"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from src.core.config.loader import resolve_values
from src.core.config.rules_loader import builtin_rule_set
from src.core.models.rules import RuleSet


# Subset of the Airbyte chart defaults that the enterprise rules touch
AIRBYTE_DEFAULT_VALUES = textwrap.dedent("""\
    global:
      edition: community
      airbyteUrl: ""
      enterprise:
        secretName: airbyte-license
        licenseKeySecretKey: license-key
      auth:
        instanceAdmin:
          secretName: airbyte-auth-secrets
          firstName: ""
          lastName: ""
          emailSecretKey: instance-admin-email
          passwordSecretKey: instance-admin-password
    server:
      replicaCount: 1
""")

# Settings that make the enterprise + OIDC SSO configuration complete
FULL_SSO_SET_VALUES = [
    "global.edition=enterprise",
    "global.enterprise.secretName=airbyte-license",
    "global.auth.instanceAdmin.secretName=sso-secrets",
    "global.auth.instanceAdmin.firstName=Octavia",
    "global.auth.instanceAdmin.lastName=Squidington",
    "global.auth.identityProvider.secretName=sso-secrets",
    "global.auth.identityProvider.type=oidc",
    "global.auth.identityProvider.oidc.domain=sso.example.org",
    "global.auth.identityProvider.oidc.appName=sso-app",
    "global.auth.identityProvider.oidc.clientIdSecretKey=client-id",
    "global.auth.identityProvider.oidc.clientSecretSecretKey=client-secret",
]


@pytest.fixture
def airbyte_chart(tmp_path: Path) -> Path:
    """A chart directory carrying only Chart.yaml and default values."""
    chart_dir = tmp_path / "charts" / "airbyte"
    chart_dir.mkdir(parents=True)
    (chart_dir / "Chart.yaml").write_text("name: airbyte\nversion: 1.0.0\n")
    (chart_dir / "values.yaml").write_text(AIRBYTE_DEFAULT_VALUES)
    return chart_dir


@pytest.fixture
def resolve(airbyte_chart: Path):
    """Resolve chart defaults plus ``--set`` style overrides into a flat config."""

    def _resolve(*set_values: str) -> dict:
        return resolve_values(airbyte_chart, set_values=list(set_values))

    return _resolve


@pytest.fixture
def full_sso_values() -> list[str]:
    """``--set`` assignments for a complete enterprise + OIDC configuration."""
    return list(FULL_SSO_SET_VALUES)


@pytest.fixture
def enterprise_rules() -> RuleSet:
    """The built-in airbyte-enterprise rule set."""
    return builtin_rule_set("airbyte-enterprise")


def _env_entry(var: str, ref) -> dict:
    return {"name": var, "valueFrom": {ref.source.value: {"name": ref.name, "key": ref.key}}}


@pytest.fixture
def workload_factory():
    """Build a rendered workload dict whose first container uses ``refs``."""

    def _build(kind: str, name: str, refs: dict, init_image: str | None = None) -> dict:
        pod: dict = {
            "containers": [{
                "name": name,
                "image": "airbyte/app:1.0.0",
                "env": [_env_entry(var, ref) for var, ref in refs.items()],
            }],
        }
        if init_image:
            pod["initContainers"] = [{"name": "keycloak-readiness-check", "image": init_image}]
        return {
            "apiVersion": "batch/v1" if kind == "Job" else "apps/v1",
            "kind": kind,
            "metadata": {"name": name},
            "spec": {"template": {"spec": pod}},
        }

    return _build


@pytest.fixture(autouse=True)
def _no_rules_env(monkeypatch):
    """Keep a developer's VG_RULES from leaking into rule resolution."""
    monkeypatch.delenv("VG_RULES", raising=False)
