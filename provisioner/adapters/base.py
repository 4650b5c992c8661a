"""
Runner base — the protocol contract between provisioning steps and the host.

Every external command (package managers, systemctl, npm, code-server)
goes through a CommandRunner. Services never call ``subprocess``
directly, so tests can swap in ``MockRunner``.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from provisioner.core.models.command import CommandResult


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners execute commands and return results.
    They NEVER raise for process failures; failures are captured in
    the CommandResult.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def which(self, tool: str) -> str | None:
        """Resolve an executable on this runner's PATH.

        Should be fast and never raise.
        """

    @abstractmethod
    def run(
        self,
        argv: Sequence[str],
        *,
        input: str | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = True,
    ) -> CommandResult:
        """Run a command to completion and return its result.

        Args:
            argv: Command and arguments.
            input: Text piped to stdin.
            env: Extra environment variables for this call only.
            capture: Capture stdout/stderr. When False the command
                inherits the terminal (foreground start).
        """

    @abstractmethod
    def prepend_path(self, directory: str) -> None:
        """Put a directory at the front of PATH for later calls (idempotent)."""

    def has(self, tool: str) -> bool:
        return self.which(tool) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def prepend_to_path(path_value: str, directory: str) -> str:
    """Return ``path_value`` with ``directory`` first, without duplicating it."""
    entries = [p for p in path_value.split(os.pathsep) if p]
    if entries and entries[0] == directory:
        return path_value
    entries = [p for p in entries if p != directory]
    return os.pathsep.join([directory, *entries])
