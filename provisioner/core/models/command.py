"""
Command result model — the execution contract.

Services ask a runner to execute an argv; the runner answers with a
CommandResult. This is the fundamental I/O contract between the
provisioning steps and the host: runners return results, never
exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of a single external command.

    A missing executable is reported as return code 127 with
    ``error`` set, the same way a shell would report it.
    """

    argv: list[str] = Field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.returncode == 0 and self.error is None

    @property
    def failed(self) -> bool:
        return not self.ok

    @property
    def combined_output(self) -> str:
        """stdout and stderr joined, the way ``2>&1`` would show them."""
        parts = [p for p in (self.stdout, self.stderr, self.error or "") if p]
        return "\n".join(p.rstrip("\n") for p in parts)

    @property
    def first_line(self) -> str:
        """First non-empty stdout line, or an empty string."""
        for line in self.stdout.splitlines():
            if line.strip():
                return line.strip()
        return ""

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)

    @classmethod
    def success(cls, argv: list[str], stdout: str = "", **kwargs: Any) -> CommandResult:
        """Create a success result."""
        return cls(argv=list(argv), returncode=0, stdout=stdout, **kwargs)

    @classmethod
    def failure(
        cls,
        argv: list[str],
        returncode: int = 1,
        stderr: str = "",
        **kwargs: Any,
    ) -> CommandResult:
        """Create a failure result."""
        return cls(argv=list(argv), returncode=returncode, stderr=stderr, **kwargs)

    @classmethod
    def not_found(cls, argv: list[str]) -> CommandResult:
        """Result for an executable that is not on PATH."""
        tool = argv[0] if argv else ""
        return cls(
            argv=list(argv),
            returncode=127,
            error=f"{tool}: command not found",
        )
