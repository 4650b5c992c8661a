"""
CLI installer — a global npm package (the Codex CLI by default).

As root the package goes into npm's default prefix. Otherwise npm's
global prefix is pointed at a user-writable directory first, so the
install never needs sudo.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.services.editor import read_version

logger = logging.getLogger(__name__)


@dataclass
class CliInstall:
    """Outcome of the CLI install."""

    package: str
    command: str
    prefix: str | None = None
    prefix_changed: bool = False
    executable: str | None = None
    version: str | None = None

    @property
    def found(self) -> bool:
        return self.executable is not None

    def to_dict(self) -> dict:
        return {
            "package": self.package,
            "command": self.command,
            "prefix": self.prefix,
            "prefix_changed": self.prefix_changed,
            "executable": self.executable,
            "version": self.version,
        }


def current_npm_prefix(runner: CommandRunner) -> str | None:
    result = runner.run(["npm", "config", "get", "prefix"])
    if result.failed:
        return None
    return result.first_line or None


def _writable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK)


def configure_user_prefix(runner: CommandRunner, npm_prefix: Path) -> tuple[str, bool]:
    """Make npm's global prefix user-writable.

    Keeps the current prefix if its ``bin`` directory is already
    writable (nvm, an earlier run). Otherwise switches to
    ``npm_prefix``.

    Returns:
        (prefix, changed)
    """
    current = current_npm_prefix(runner)
    if current and _writable_dir(Path(current) / "bin"):
        logger.info("npm global prefix is writable: %s", current)
        runner.prepend_path(str(Path(current) / "bin"))
        return current, False

    logger.info("Setting npm global prefix to %s", npm_prefix)
    (npm_prefix / "bin").mkdir(parents=True, exist_ok=True)
    result = runner.run(["npm", "config", "set", "prefix", str(npm_prefix)])
    if result.failed:
        raise ProvisionError(
            "cli",
            f"npm config set prefix {npm_prefix} failed (exit {result.returncode})",
            hint=result.combined_output.strip()[-500:],
        )
    runner.prepend_path(str(npm_prefix / "bin"))
    return str(npm_prefix), True


def install_cli(
    runner: CommandRunner,
    privilege: PrivilegeContext,
    package: str,
    command: str,
    npm_prefix: Path,
) -> CliInstall:
    """Install ``package`` globally and look up ``command``.

    A missing command after a successful install is only a warning.

    Raises:
        ProvisionError: ``npm install`` failed.
    """
    outcome = CliInstall(package=package, command=command)

    if privilege.is_root:
        outcome.prefix = current_npm_prefix(runner)
    else:
        outcome.prefix, outcome.prefix_changed = configure_user_prefix(runner, npm_prefix)

    logger.info("Installing %s with npm", package)
    result = runner.run(["npm", "install", "-g", package])
    if result.failed:
        raise ProvisionError(
            "cli",
            f"npm install -g {package} failed (exit {result.returncode})",
            hint="\n".join(result.combined_output.strip().splitlines()[-5:]),
        )

    outcome.executable = runner.which(command)
    if outcome.executable is None:
        logger.warning(
            "%s is not on PATH; log in again so ~/.local/bin is on PATH", command,
        )
        return outcome

    outcome.version = read_version(runner, outcome.executable)
    logger.info("%s: %s", command, outcome.version or "version unknown")
    return outcome
