"""
webide-provisioner — CLI entrypoint.

Usage:
    provision --help
    provision run
    provision config check
    python -m provisioner.main run --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from provisioner import __version__
from provisioner.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="provision")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="YAML file with provisioning options (environment variables override it).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """webide-provisioner — set up code-server and the Codex CLI on this host."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("PROVISION_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("PROVISION_LOG_FILE"),
        log_file_level=os.environ.get("PROVISION_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--skip-packages", is_flag=True, help="Don't install base packages.")
@click.option("--skip-service", is_flag=True, help="Don't set up systemd.")
@click.option("--skip-cli", is_flag=True, help="Don't install Node.js or the CLI.")
@click.option("--skip-extensions", is_flag=True, help="Don't install extensions.")
@click.option(
    "--foreground/--no-foreground",
    "foreground",
    default=None,
    help="Start code-server in the foreground when systemd was not used.",
)
@click.pass_context
def run(
    ctx: click.Context,
    as_json: bool,
    skip_packages: bool,
    skip_service: bool,
    skip_cli: bool,
    skip_extensions: bool,
    foreground: bool | None,
) -> None:
    """Provision this host end to end.

    Examples:

        provision run

        CODE_SERVER_AUTH=password provision run --json

        CODE_SERVER_EXTENSIONS="ms-python.python" provision run --skip-cli
    """
    from provisioner.core.use_cases.provision import run_provision, start_foreground
    from provisioner.ui.cli.helpers import get_runner, load_config_or_exit

    cfg = load_config_or_exit(
        ctx,
        skip_packages=skip_packages or None,
        skip_service=skip_service or None,
        skip_cli=skip_cli or None,
        skip_extensions=skip_extensions or None,
        start_foreground=foreground,
    )
    runner = get_runner(ctx)
    result = run_provision(cfg, runner, euid=ctx.obj.get("euid"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
    else:
        if not result.ok:
            click.secho(f"❌ [{result.failed_step}] {result.error}", fg="red", err=True)
            if result.hint:
                for line in result.hint.splitlines():
                    click.echo(f"   {line}", err=True)
            click.echo(
                f"   Completed before failure: {', '.join(result.completed_steps) or 'nothing'}",
                err=True,
            )
            sys.exit(1)

        click.echo()
        click.secho("✅ Setup complete", fg="green", bold=True)
        click.echo()
        for line in result.next_steps():
            click.echo(line)

        if result.warnings:
            click.echo()
            click.secho(f"⚠️  {len(result.warnings)} warning(s):", fg="yellow")
            for warn in result.warnings:
                click.echo(f"   • {warn}")
        click.echo()

    activated = result.service is not None and result.service.activated
    if cfg.start_foreground and not activated and result.editor is not None:
        fg = start_foreground(runner, cfg, result.editor.executable)
        sys.exit(fg.returncode)


# ── Register sub-command groups from provisioner/ui/cli/ ──────────

from provisioner.ui.cli.config import config  # noqa: E402
from provisioner.ui.cli.extensions import extensions  # noqa: E402

cli.add_command(config)
cli.add_command(extensions)


if __name__ == "__main__":
    cli()
