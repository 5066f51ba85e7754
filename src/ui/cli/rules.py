"""
CLI commands for rule sets.

Thin wrappers over ``src.core.config.rules_loader``.
"""

from __future__ import annotations

import json
import sys

import click


@click.group("rules")
def rules() -> None:
    """Rule sets — list built-ins, show the active rules."""


@rules.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def list_rules(as_json: bool) -> None:
    """List built-in rule sets."""
    from src.core.config.rules_loader import builtin_rule_set, builtin_rule_set_names

    entries = []
    for name in builtin_rule_set_names():
        rule_set = builtin_rule_set(name)
        entries.append({
            "name": name,
            "description": rule_set.description,
            "rules": len(rule_set.rules),
        })

    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return

    click.secho("📏 Built-in rule sets:", fg="cyan", bold=True)
    for entry in entries:
        click.echo(f"   • {entry['name']} ({entry['rules']} rules)")
        if entry["description"]:
            click.echo(f"     {entry['description']}")


@rules.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """Show the rules that would be applied, with their guards."""
    from src.core.config.loader import ConfigError
    from src.core.config.rules_loader import resolve_rule_set

    try:
        rule_set = resolve_rule_set(ctx.obj.get("rules_path"), ctx.obj.get("ruleset_name"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(rule_set.model_dump(mode="json"), indent=2))
        return

    click.secho(f"📏 {rule_set.name} — {len(rule_set.rules)} rules", fg="cyan", bold=True)
    if rule_set.description:
        click.echo(f"   {rule_set.description}")
    click.echo()

    for rule in rule_set.rules:
        click.secho(f"   {rule.key}", bold=True)
        guards = " and ".join(g.describe() for g in rule.guards) or "always"
        click.echo(f"      when: {guards}")
