"""
Runtime upgrader — make sure Node.js is at least a given major version.

Idempotent: when ``node`` and ``npm`` exist and the major version is
high enough, nothing is run. Otherwise the NodeSource repository is
added (apt/dnf/yum) or the distro package is installed
(pacman/apk), and the version is checked again. Still too old is
fatal: the CLI install depends on it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.services.editor import curl_pipe_command
from provisioner.core.services.packages import (
    PackageManager,
    detect_package_manager,
    install_packages,
)

logger = logging.getLogger(__name__)

_NODE_VERSION_RE = re.compile(r"v?(\d+)\.\d+")

NODESOURCE_DEB = "https://deb.nodesource.com/setup_{major}.x"
NODESOURCE_RPM = "https://rpm.nodesource.com/setup_{major}.x"


@dataclass
class RuntimeStatus:
    """Node.js state after the upgrader ran."""

    major: int
    required: int
    upgraded: bool = False
    package_manager: str | None = None

    def to_dict(self) -> dict:
        return {
            "node_major": self.major,
            "required": self.required,
            "upgraded": self.upgraded,
            "package_manager": self.package_manager,
        }


def parse_node_major(output: str) -> int:
    """Major version from ``node --version`` output (``v22.3.0`` → 22)."""
    match = _NODE_VERSION_RE.search(output or "")
    return int(match.group(1)) if match else 0


def read_node_major(runner: CommandRunner) -> int:
    """Installed Node.js major version, 0 if absent or unparseable."""
    if not runner.has("node"):
        return 0
    result = runner.run(["node", "--version"])
    if result.failed:
        return 0
    return parse_node_major(result.stdout)


def runtime_satisfied(runner: CommandRunner, required_major: int) -> tuple[bool, int]:
    major = read_node_major(runner)
    ok = runner.has("node") and runner.has("npm") and major >= required_major
    return ok, major


def _add_repository(
    runner: CommandRunner,
    privilege: PrivilegeContext,
    url: str,
) -> None:
    logger.info("Adding NodeSource repository: %s", url)
    result = runner.run(
        curl_pipe_command(url, shell="bash -", elevation=privilege.shell_elevation(preserve_env=True))
    )
    if result.failed:
        raise ProvisionError(
            "runtime",
            f"NodeSource setup script failed (exit {result.returncode})",
            hint="\n".join(result.combined_output.strip().splitlines()[-5:]),
        )


def upgrade_node(
    runner: CommandRunner,
    privilege: PrivilegeContext,
    pm: PackageManager,
    required_major: int,
) -> None:
    """Install or upgrade Node.js through ``pm``."""
    if pm.name == "apt-get":
        _add_repository(runner, privilege, NODESOURCE_DEB.format(major=required_major))
        result = runner.run(privilege.wrap(["apt-get", "install", "-y", "nodejs"]))
    elif pm.name in ("dnf", "yum"):
        _add_repository(runner, privilege, NODESOURCE_RPM.format(major=required_major))
        result = runner.run(privilege.wrap([pm.name, "install", "-y", "nodejs"]))
    else:
        install_packages(runner, privilege, pm, ["nodejs", "npm"], step="runtime")
        return

    if result.failed:
        raise ProvisionError(
            "runtime",
            f"Installing nodejs with {pm.name} failed (exit {result.returncode})",
            hint="\n".join(result.combined_output.strip().splitlines()[-5:]),
        )


def ensure_node_runtime(
    runner: CommandRunner,
    privilege: PrivilegeContext,
    required_major: int,
) -> RuntimeStatus:
    """Guarantee ``node`` >= ``required_major`` and ``npm`` are on PATH.

    Raises:
        ProvisionError: No way to install Node.js, or the version is
            still too old afterwards.
    """
    ok, major = runtime_satisfied(runner, required_major)
    if ok:
        logger.info("node v%d satisfies >= %d; nothing to do", major, required_major)
        return RuntimeStatus(major=major, required=required_major)

    logger.info(
        "node major %s < %d or npm missing; upgrading",
        major or "(none)", required_major,
    )
    pm = detect_package_manager(runner)
    if pm is None:
        raise ProvisionError(
            "runtime",
            f"Cannot install Node.js >= {required_major}: no supported package manager",
            hint="Install Node.js and npm manually, then re-run.",
        )

    upgrade_node(runner, privilege, pm, required_major)

    ok, major = runtime_satisfied(runner, required_major)
    if not ok:
        if not runner.has("npm"):
            detail = "npm is missing"
        else:
            detail = f"node major is {major}"
        raise ProvisionError(
            "runtime",
            f"Node.js >= {required_major} still not available after upgrade ({detail})",
            hint="Distro packages may be too old; install Node.js from nodejs.org.",
        )

    logger.info("node v%d installed", major)
    return RuntimeStatus(
        major=major,
        required=required_major,
        upgraded=True,
        package_manager=pm.name,
    )
