"""
CLI commands for env var wiring expectations.

Thin wrappers over ``src.core.services.env_refs``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


@click.group("env")
def env() -> None:
    """Env wiring — expected ConfigMap/Secret references per workload."""


@env.command("expected")
@click.argument("component")
@click.option("--release", default="airbyte", show_default=True, help="Release name.")
@click.option("--chart", "chart_dir", default=None,
              type=click.Path(file_okay=False, path_type=Path),
              help="Chart directory whose values.yaml supplies defaults.")
@click.option("--values", "-f", "values_files", multiple=True,
              type=click.Path(dir_okay=False, path_type=Path),
              help="Values file layered over chart defaults. Repeatable.")
@click.option("--set", "set_values", multiple=True, help="Override a value (key=value).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def expected(
    component: str,
    release: str,
    chart_dir: Path | None,
    values_files: tuple[Path, ...],
    set_values: tuple[str, ...],
    as_json: bool,
) -> None:
    """Show the env references COMPONENT should render with.

    Examples:

        valuesguard env expected server --set global.edition=enterprise
    """
    from src.core.config.loader import ConfigError, resolve_values
    from src.core.services.env_refs import expected_env_refs, expected_readiness_image

    try:
        config = resolve_values(chart_dir, list(values_files), list(set_values))
        refs = expected_env_refs(config, component, release)
        image = expected_readiness_image(config, component)
    except (ConfigError, KeyError) as e:
        message = e.args[0] if isinstance(e, KeyError) else str(e)
        click.secho(f"❌ {message}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({
            "component": component,
            "release": release,
            "env": {var: ref.to_dict() for var, ref in refs.items()},
            "readiness_image": image or None,
        }, indent=2))
        return

    click.secho(f"🔗 {component} ({release}) — {len(refs)} variables", fg="cyan", bold=True)
    if not refs:
        click.echo("   No wired variables for this configuration")
    for var, ref in refs.items():
        kind = "secret" if ref.source.value == "secretKeyRef" else "configmap"
        click.echo(f"   {var:<26} {kind:<9} {ref.name}/{ref.key}")
    if image:
        click.echo()
        click.echo(f"   readiness image: {image}")
