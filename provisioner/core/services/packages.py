"""
Package installer — base dependencies through the host package manager.

Probes package managers in a fixed priority order and installs the
base set through the first one found. A host with no supported
manager only gets a warning: the tools may already be present.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.privilege import PrivilegeContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManager:
    """How to drive one package manager."""

    name: str
    install: tuple[str, ...]
    refresh: tuple[str, ...] | None = None
    base_packages: tuple[str, ...] = field(default=())

    def install_argv(self, packages: list[str] | tuple[str, ...]) -> list[str]:
        return [*self.install, *packages]


_BASE = ("curl", "git", "tar", "ca-certificates", "python3")

# Priority order matters: dnf hosts often ship a yum shim.
PACKAGE_MANAGERS: tuple[PackageManager, ...] = (
    PackageManager(
        name="apt-get",
        refresh=("apt-get", "update", "-y"),
        install=("apt-get", "install", "-y"),
        base_packages=_BASE,
    ),
    PackageManager(
        name="dnf",
        install=("dnf", "install", "-y"),
        base_packages=_BASE,
    ),
    PackageManager(
        name="yum",
        install=("yum", "install", "-y"),
        base_packages=_BASE,
    ),
    PackageManager(
        name="pacman",
        install=("pacman", "-Sy", "--noconfirm"),
        base_packages=("curl", "git", "tar", "ca-certificates", "python"),
    ),
    PackageManager(
        name="apk",
        install=("apk", "add", "--no-cache"),
        base_packages=_BASE,
    ),
)


def detect_package_manager(runner: CommandRunner) -> PackageManager | None:
    """Return the first supported package manager on PATH, or None."""
    for pm in PACKAGE_MANAGERS:
        if runner.has(pm.name):
            return pm
    return None


def install_packages(
    runner: CommandRunner,
    privilege: PrivilegeContext,
    pm: PackageManager,
    packages: list[str] | tuple[str, ...],
    step: str = "packages",
) -> None:
    """Refresh indexes (where needed) and install packages.

    Raises:
        ProvisionError: The package manager exited non-zero.
    """
    if pm.refresh:
        result = runner.run(privilege.wrap(pm.refresh))
        if result.failed:
            raise ProvisionError(
                step,
                f"{pm.name} index refresh failed (exit {result.returncode})",
                hint=_tail(result.combined_output),
            )

    result = runner.run(privilege.wrap(pm.install_argv(packages)))
    if result.failed:
        raise ProvisionError(
            step,
            f"{pm.name} could not install {' '.join(packages)} (exit {result.returncode})",
            hint=_tail(result.combined_output),
        )


def install_base_packages(runner: CommandRunner, privilege: PrivilegeContext) -> str | None:
    """Install the base dependency set.

    Returns:
        The package manager name, or None when none was found (warned).
    """
    pm = detect_package_manager(runner)
    if pm is None:
        logger.warning(
            "No supported package manager found; install %s manually if missing",
            "/".join(_BASE),
        )
        return None

    logger.info("Installing base packages with %s: %s", pm.name, " ".join(pm.base_packages))
    install_packages(runner, privilege, pm, pm.base_packages)
    return pm.name


def _tail(text: str, lines: int = 5) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])
