"""
CLI commands for code-server extensions.

Thin wrappers over ``provisioner.core.services.extensions``.
"""

from __future__ import annotations

import json
import sys

import click

from provisioner.core.errors import ProvisionError


@click.group()
def extensions() -> None:
    """Extensions — list, install."""


@extensions.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def extensions_list(ctx: click.Context, as_json: bool) -> None:
    """Show the extensions a run would install, and where they come from."""
    from provisioner.core.services.extensions import resolve_extensions
    from provisioner.ui.cli.helpers import echo_provision_error, load_config_or_exit

    cfg = load_config_or_exit(ctx)
    try:
        resolved = resolve_extensions(cfg)
    except ProvisionError as e:
        if as_json:
            click.echo(json.dumps({"error": e.to_dict()}, indent=2))
        else:
            echo_provision_error(e)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(resolved.to_dict(), indent=2))
        return

    source = f"{resolved.source} ({resolved.path})" if resolved.path else resolved.source
    click.secho(f"🧩 Extensions: {len(resolved)} from {source}", fg="cyan", bold=True)
    for ext in resolved:
        click.echo(f"   • {ext}")


@extensions.command("install")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def extensions_install(ctx: click.Context, as_json: bool) -> None:
    """Install the resolved extensions into the existing code-server."""
    from provisioner.core.use_cases.provision import run_extensions_only
    from provisioner.ui.cli.helpers import echo_provision_error, get_runner, load_config_or_exit

    cfg = load_config_or_exit(ctx)
    try:
        report = run_extensions_only(cfg, get_runner(ctx))
    except ProvisionError as e:
        if as_json:
            click.echo(json.dumps({"error": e.to_dict()}, indent=2))
        else:
            echo_provision_error(e)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(report.status, "white")
    click.secho(
        f"   Result: {report.succeeded}/{report.total} installed",
        fg=status_color,
        bold=True,
    )
    for ext in report.failed:
        click.secho(f"   ✗ {ext}", fg="red")
    if report.failed:
        click.echo(f"   log: {report.log_path}")
