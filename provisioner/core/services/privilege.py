"""
Privilege resolution — decide how privileged commands will run.
"""

from __future__ import annotations

import logging
import os

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.privilege import SUDO, PrivilegeContext

logger = logging.getLogger(__name__)


def resolve_privilege(runner: CommandRunner, euid: int | None = None) -> PrivilegeContext:
    """Build the PrivilegeContext for this run.

    Root needs no prefix. Anyone else needs sudo on PATH; without it
    the run cannot install packages or write unit files, so this is
    fatal.

    Args:
        runner: Runner used to look up ``sudo``.
        euid: Effective user id (default: ``os.geteuid()``).

    Raises:
        ProvisionError: Not root and sudo is not available.
    """
    if euid is None:
        euid = os.geteuid()

    if euid == 0:
        logger.info("Running as root; privileged commands run without sudo")
        return PrivilegeContext.root()

    if not runner.has(SUDO):
        raise ProvisionError(
            "privilege",
            "sudo was not found and the current user is not root",
            hint="Install sudo or re-run as root.",
        )

    logger.debug("Privileged commands will use sudo")
    return PrivilegeContext.sudo()
