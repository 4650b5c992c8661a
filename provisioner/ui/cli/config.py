"""
CLI commands for provisioning configuration.

Thin wrappers over ``provisioner.core.config`` and the config writer.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def config() -> None:
    """Configuration — check, show, render."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate configuration from --config and the environment."""
    from provisioner.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"), env=ctx.obj.get("env"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   code-server: {result.config.bind_addr}:{result.config.port}")
        click.echo(f"   Auth: {result.config.auth}")
        click.echo(f"   Node.js: >= {result.config.node_major_min}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


@config.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show the resolved configuration (password masked)."""
    from provisioner.ui.cli.helpers import load_config_or_exit

    cfg = load_config_or_exit(ctx)
    data = cfg.masked()

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    width = max(len(k) for k in data)
    for key, value in data.items():
        click.echo(f"   {key:<{width}}  {value if value is not None else '-'}")


@config.command("render")
@click.option("--show-password", is_flag=True, help="Print the real password.")
@click.pass_context
def config_render(ctx: click.Context, show_password: bool) -> None:
    """Print the config.yaml that 'provision run' would write."""
    from provisioner.core.services.editor_config import render_editor_config, resolve_password
    from provisioner.ui.cli.helpers import load_config_or_exit

    cfg = load_config_or_exit(ctx)
    password, generated = resolve_password(cfg)
    if password and not show_password:
        password = "********"

    click.echo(f"# {cfg.config_file}", err=True)
    if generated:
        click.echo("# password is generated fresh on each run unless CODE_SERVER_PASSWORD is set", err=True)
    click.echo(render_editor_config(cfg, password), nl=False)
