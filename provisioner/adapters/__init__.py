"""Adapters — how provisioning steps reach the host.

Public re-exports for convenient access.
"""

from provisioner.adapters.base import CommandRunner
from provisioner.adapters.mock import MockRunner
from provisioner.adapters.shell.command import SubprocessRunner

__all__ = [
    "CommandRunner",
    "MockRunner",
    "SubprocessRunner",
]
