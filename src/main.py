"""
values-guard — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main check --chart charts/airbyte -f values.yaml
    python -m src.main render --chart charts/airbyte --set global.edition=enterprise
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from src.core.observability.logging_config import resolve_level, setup_from_env

from src import __version__


def _values_options(func):  # type: ignore[no-untyped-def]
    """Shared value-source options for check/render/verify."""
    func = click.option(
        "--set", "set_values", multiple=True,
        help="Override a value (key=value). Repeatable; applied last.",
    )(func)
    func = click.option(
        "--values", "-f", "values_files", multiple=True,
        type=click.Path(dir_okay=False, path_type=Path),
        help="Values file layered over chart defaults. Repeatable.",
    )(func)
    func = click.option(
        "--chart", "chart_dir", default=None,
        type=click.Path(file_okay=False, path_type=Path),
        help="Chart directory whose values.yaml supplies defaults.",
    )(func)
    func = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="valuesguard")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--rules",
    "-r",
    "rules_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to a rules file (default: values-rules.yml or the built-in set).",
)
@click.option("--ruleset", "ruleset_name", default=None, help="Name of a built-in rule set.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    rules_path: str | None,
    ruleset_name: str | None,
) -> None:
    """values-guard — validate Helm chart values before rendering."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["rules_path"] = Path(rules_path) if rules_path else None
    ctx.obj["ruleset_name"] = ruleset_name

    setup_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _print_check(result, quiet: bool) -> None:  # type: ignore[no-untyped-def]
    """Human output for a ValuesCheckResult."""
    if result.errors:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")
        return

    if result.valid:
        click.secho("✅ Values are valid", fg="green", bold=True)
        if not quiet:
            click.echo(f"   Rule set: {result.rule_set} ({result.rule_count} rules)")
            click.echo(f"   Keys: {len(result.config)}")
        return

    click.secho(f"❌ {len(result.violations)} violation(s) — rule set {result.rule_set}:", fg="red", bold=True)
    for message in result.violations:
        click.echo(f"   • {message}")


@cli.command()
@_values_options
@click.pass_context
def check(
    ctx: click.Context,
    as_json: bool,
    chart_dir: Path | None,
    values_files: tuple[Path, ...],
    set_values: tuple[str, ...],
) -> None:
    """Validate resolved values against the rule set.

    Examples:

        valuesguard check --chart charts/airbyte -f prod.yaml

        valuesguard check --set global.edition=enterprise
    """
    from src.core.use_cases.values_check import check_values

    result = check_values(
        chart_dir,
        list(values_files),
        list(set_values),
        rules_path=ctx.obj.get("rules_path"),
        ruleset_name=ctx.obj.get("ruleset_name"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    _print_check(result, ctx.obj.get("quiet", False))
    if not result.valid:
        sys.exit(1)


@cli.command()
@_values_options
@click.option("--release", default="airbyte", show_default=True, help="Release name.")
@click.option("--namespace", "-n", default="", help="Namespace passed to helm.")
@click.option("--output", "-o", "output_path", default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              help="Write rendered manifests to a file instead of stdout.")
@click.pass_context
def render(
    ctx: click.Context,
    as_json: bool,
    chart_dir: Path | None,
    values_files: tuple[Path, ...],
    set_values: tuple[str, ...],
    release: str,
    namespace: str,
    output_path: Path | None,
) -> None:
    """Validate values, then render the chart with helm template."""
    import yaml

    from src.core.use_cases.render import render_chart

    if chart_dir is None:
        raise click.UsageError("--chart is required for render")

    result = render_chart(
        chart_dir, release,
        namespace=namespace,
        values_files=list(values_files),
        set_values=list(set_values),
        rules_path=ctx.obj.get("rules_path"),
        ruleset_name=ctx.obj.get("ruleset_name"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.check.valid:
        _print_check(result.check, ctx.obj.get("quiet", False))
        sys.exit(1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    manifests = yaml.safe_dump_all(result.documents, sort_keys=False)
    if output_path:
        output_path.write_text(manifests, encoding="utf-8")
        click.secho(f"✅ Rendered {len(result.documents)} documents → {output_path}", fg="green")
    else:
        click.echo(manifests)


@cli.command()
@_values_options
@click.option("--release", default="airbyte", show_default=True, help="Release name.")
@click.option("--namespace", "-n", default="", help="Namespace passed to helm.")
@click.option("--component", "components", multiple=True,
              help="Workload to verify (default: keycloak-setup and server).")
@click.pass_context
def verify(
    ctx: click.Context,
    as_json: bool,
    chart_dir: Path | None,
    values_files: tuple[Path, ...],
    set_values: tuple[str, ...],
    release: str,
    namespace: str,
    components: tuple[str, ...],
) -> None:
    """Render the chart and check env var wiring of enterprise workloads."""
    from src.core.use_cases.render import DEFAULT_COMPONENTS, verify_wiring

    if chart_dir is None:
        raise click.UsageError("--chart is required for verify")

    result = verify_wiring(
        chart_dir, release,
        components=components or DEFAULT_COMPONENTS,
        namespace=namespace,
        values_files=list(values_files),
        set_values=list(set_values),
        rules_path=ctx.obj.get("rules_path"),
        ruleset_name=ctx.obj.get("ruleset_name"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.check.valid:
        _print_check(result.check, ctx.obj.get("quiet", False))
        sys.exit(1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    for workload in result.verified:
        click.secho(f"   ✓ {workload}", fg="green")

    if result.problems:
        click.echo()
        click.secho("❌ Wiring problems:", fg="red", bold=True)
        for problem in result.problems:
            click.echo(f"   • {problem}")
        sys.exit(1)

    click.secho("✅ Env wiring matches", fg="green", bold=True)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", "-p", default=8000, type=int, help="Port number.")
@click.pass_context
def web(ctx: click.Context, host: str, port: int) -> None:
    "Start the validation API server."
    from src.ui.web.server import create_app, run_server

    app = create_app(
        rules_path=ctx.obj.get("rules_path"),
        ruleset_name=ctx.obj.get("ruleset_name"),
    )

    debug = ctx.obj.get("debug", False)

    click.echo()
    click.secho("⚡ values-guard — validation API", bold=True)
    click.echo(f"   Endpoint: http://{host}:{port}/api/validate")
    if debug:
        click.secho("   Logging: DEBUG (all output)", fg="yellow")
    click.echo()

    run_server(app, host=host, port=port, debug=debug)


# ── Register sub-command groups from src/ui/cli/ ──────────────────

from src.ui.cli.env import env
from src.ui.cli.rules import rules

cli.add_command(rules)
cli.add_command(env)


if __name__ == "__main__":
    cli()
