"""
Reporter — operator next steps after a run.

Pure: builds lines of text, the CLI prints them.
"""

from __future__ import annotations

from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.models.extension import ExtensionReport
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.models.service import ServiceActivation


def tunnel_command(config: ProvisioningConfig) -> str:
    return f"ssh -N -L {config.port}:127.0.0.1:{config.port} {config.user}@<server>"


def local_url(config: ProvisioningConfig) -> str:
    return f"http://127.0.0.1:{config.port}"


def foreground_command(config: ProvisioningConfig, editor: str = "code-server") -> str:
    return f"{editor} --config {config.config_file}"


def build_next_steps(
    config: ProvisioningConfig,
    activation: ServiceActivation | None = None,
    password: str | None = None,
    privilege: PrivilegeContext | None = None,
    extensions: ExtensionReport | None = None,
    cli_found: bool = True,
) -> list[str]:
    """Lines telling the operator how to reach and manage code-server."""
    lines = [
        "Next steps:",
        "  1) Open an SSH tunnel from your machine:",
        f"     {tunnel_command(config)}",
        "",
        "  2) Open in your browser:",
        f"     {local_url(config)}",
        "",
        f"  3) Run the assistant in a terminal on the server: {config.cli_command}",
        "     (the first run asks you to sign in)",
    ]
    if not cli_found:
        lines.append(f"     {config.cli_command} is not on PATH yet; log in again first.")
    lines.append("")

    if config.auth == "password":
        lines.append(f"code-server password: {password or config.password or '(see config.yaml)'}")
    else:
        lines.append("code-server auth: none (reach it through the SSH tunnel only)")
    lines.append(f"config: {config.config_file}")
    lines.append("")

    if activation is not None and activation.activated:
        elevation = privilege.shell_elevation() if privilege else "sudo "
        lines.append("service:")
        lines.extend(f"  {cmd}" for cmd in activation.management_commands(elevation))
    else:
        lines.append("service: not managed by systemd; start code-server manually:")
        lines.append(f"  {foreground_command(config)}")

    if extensions is not None and extensions.failed:
        lines.append("")
        lines.append(
            f"extensions: {extensions.succeeded} installed, {extensions.failed_count} failed"
        )
        lines.extend(f"  - {ext}" for ext in extensions.failed)
        if extensions.log_path:
            lines.append(f"  log: {extensions.log_path}")

    return lines
