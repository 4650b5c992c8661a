"""
Editor installer — code-server through its upstream install script.

The script is piped straight into ``sh`` (it elevates on its own when
it needs to). No checksum is verified; see DESIGN.md.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.services.shell_profile import ensure_user_bin_on_path

logger = logging.getLogger(__name__)

EDITOR_COMMAND = "code-server"


@dataclass
class EditorInstall:
    """Where code-server ended up."""

    executable: str
    version: str | None = None
    profile_updated: Path | None = None

    def to_dict(self) -> dict:
        return {
            "executable": self.executable,
            "version": self.version,
            "profile_updated": str(self.profile_updated) if self.profile_updated else None,
        }


def curl_pipe_command(url: str, shell: str = "sh", elevation: str = "") -> list[str]:
    """``curl -fsSL URL | <elevation><shell>`` as an argv for ``bash -c``."""
    return ["bash", "-c", f"curl -fsSL {shlex.quote(url)} | {elevation}{shell}"]


def read_version(runner: CommandRunner, executable: str) -> str | None:
    """First line of ``<executable> --version``, best-effort."""
    result = runner.run([executable, "--version"])
    if result.failed:
        return None
    return result.first_line or None


def install_editor(
    runner: CommandRunner,
    install_url: str,
    home: Path,
) -> EditorInstall:
    """Run the code-server installer and verify the binary.

    Raises:
        ProvisionError: The installer failed or ``code-server`` is not
            on PATH afterwards.
    """
    logger.info("Installing code-server from %s", install_url)
    result = runner.run(curl_pipe_command(install_url, shell="sh"))
    if result.failed:
        raise ProvisionError(
            "editor",
            f"code-server installer failed (exit {result.returncode})",
            hint="\n".join(result.combined_output.strip().splitlines()[-5:]),
        )

    profile = ensure_user_bin_on_path(runner, home)

    executable = runner.which(EDITOR_COMMAND)
    if executable is None:
        raise ProvisionError(
            "editor",
            "code-server is not on PATH after installation",
            hint="Add ~/.local/bin to PATH (or re-source your shell profile) and re-run.",
        )

    version = read_version(runner, executable)
    logger.info("code-server: %s", version or "version unknown")
    return EditorInstall(executable=executable, version=version, profile_updated=profile)
