"""
Privilege context — how to run a command that mutates the system.

Computed once at the start of a run and passed explicitly to every
step that installs packages, writes unit files, or upgrades the
runtime. Tests substitute ``PrivilegeContext.root()`` to get a
no-op elevation strategy.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

SUDO = "sudo"


class PrivilegeContext(BaseModel):
    """Elevation strategy for privileged commands."""

    model_config = ConfigDict(frozen=True)

    is_root: bool = False
    prefix: tuple[str, ...] = ()

    @classmethod
    def root(cls) -> PrivilegeContext:
        """Running as the superuser: commands are used as-is."""
        return cls(is_root=True, prefix=())

    @classmethod
    def sudo(cls) -> PrivilegeContext:
        """Unprivileged user with sudo available."""
        return cls(is_root=False, prefix=(SUDO,))

    def wrap(self, argv: Sequence[str]) -> list[str]:
        """Prefix an argv with the elevation tokens (if any)."""
        return [*self.prefix, *argv]

    def shell_elevation(self, preserve_env: bool = False) -> str:
        """The elevation prefix as a shell fragment, for piped commands.

        ``preserve_env`` adds ``-E`` so setup scripts see the caller's
        environment (proxy settings and the like).
        """
        if not self.prefix:
            return ""
        tokens = list(self.prefix)
        if preserve_env and tokens[0] == SUDO:
            tokens.append("-E")
        return " ".join(tokens) + " "
