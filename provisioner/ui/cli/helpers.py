"""
Shared helpers for CLI commands.
"""

from __future__ import annotations

import sys
from typing import Any

import click

from provisioner.adapters.base import CommandRunner
from provisioner.adapters.shell.command import SubprocessRunner
from provisioner.core.config.loader import ConfigError, load_config
from provisioner.core.errors import ProvisionError
from provisioner.core.models.config import ProvisioningConfig


def get_runner(ctx: click.Context) -> CommandRunner:
    """The runner for this invocation (tests pass one in ``obj``)."""
    runner = ctx.obj.get("runner")
    if runner is None:
        runner = SubprocessRunner()
        ctx.obj["runner"] = runner
    return runner


def load_config_or_exit(ctx: click.Context, **overrides: Any) -> ProvisioningConfig:
    """Load configuration, or print the error and exit 1."""
    try:
        return load_config(
            env=ctx.obj.get("env"),
            path=ctx.obj.get("config_path"),
            overrides=overrides,
        )
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def echo_provision_error(error: ProvisionError) -> None:
    click.secho(f"❌ [{error.step}] {error.message}", fg="red", err=True)
    if error.hint:
        for line in error.hint.splitlines():
            click.echo(f"   {line}", err=True)
