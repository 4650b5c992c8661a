"""
Mock runner — universal test double for host commands.

Simulates a host without touching it: a set of installed tools,
scripted responses matched by argv prefix, and a log of every call.
Unscripted commands succeed with empty output.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from provisioner.adapters.base import CommandRunner
from provisioner.core.models.command import CommandResult


@dataclass
class _Scripted:
    prefix: tuple[str, ...]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    times: int | None = None
    provides: tuple[str, ...] = ()
    removes: tuple[str, ...] = ()
    used: int = field(default=0)

    def matches(self, argv: Sequence[str]) -> bool:
        if self.times is not None and self.used >= self.times:
            return False
        return _normalise(argv[: len(self.prefix)], self.prefix) == self.prefix


def _normalise(argv: Sequence[str], prefix: Sequence[str]) -> tuple[str, ...]:
    """Compare ``/some/dir/tool`` equal to a bare ``tool`` in a prefix."""
    if argv and prefix and "/" not in prefix[0]:
        return (argv[0].rsplit("/", 1)[-1], *argv[1:])
    return tuple(argv)


@dataclass
class RecordedCall:
    argv: list[str]
    input: str | None = None
    env: dict[str, str] | None = None
    capture: bool = True


class MockRunner(CommandRunner):
    """Scriptable in-memory runner.

    Example::

        runner = MockRunner(tools=["curl", "apt-get"])
        runner.set_response(["node", "--version"], stdout="v18.19.0\\n", times=1)
        runner.set_response(["node", "--version"], stdout="v22.3.0\\n")
        runner.set_response(["sh"], provides=["code-server"])
    """

    def __init__(self, tools: Iterable[str] = (), path: Sequence[str] = ("/usr/bin",)):
        self._tools: set[str] = set(tools)
        self._path: list[str] = list(path)
        self._scripted: list[_Scripted] = []
        self._calls: list[RecordedCall] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def calls(self) -> list[RecordedCall]:
        """All calls this mock has received, in order."""
        return self._calls

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def path(self) -> list[str]:
        return list(self._path)

    def argvs(self) -> list[list[str]]:
        return [c.argv for c in self._calls]

    def was_called(self, prefix: Sequence[str]) -> bool:
        """Whether any call started with the given argv prefix."""
        n = len(prefix)
        return any(_normalise(c.argv[:n], prefix) == tuple(prefix) for c in self._calls)

    def calls_matching(self, prefix: Sequence[str]) -> list[RecordedCall]:
        n = len(prefix)
        return [c for c in self._calls if _normalise(c.argv[:n], prefix) == tuple(prefix)]

    # ── Host simulation ─────────────────────────────────────────

    def add_tool(self, *tools: str) -> None:
        self._tools.update(tools)

    def remove_tool(self, *tools: str) -> None:
        self._tools.difference_update(tools)

    def which(self, tool: str) -> str | None:
        if tool in self._tools:
            return f"{self._path[0]}/{tool}" if self._path else tool
        return None

    def prepend_path(self, directory: str) -> None:
        if self._path and self._path[0] == directory:
            return
        self._path = [directory, *(p for p in self._path if p != directory)]

    def set_response(
        self,
        prefix: Sequence[str],
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        times: int | None = None,
        provides: Iterable[str] = (),
        removes: Iterable[str] = (),
    ) -> None:
        """Script the result for commands starting with ``prefix``.

        Responses limited with ``times`` are consumed first, in
        registration order, so a ``times=1`` response plus an unlimited
        one models a value that changes after the first call. Among
        unlimited responses the latest registration wins, which lets a
        test override a fixture default.
        """
        self._scripted.append(_Scripted(
            prefix=tuple(prefix),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            times=times,
            provides=tuple(provides),
            removes=tuple(removes),
        ))

    def set_failure(self, prefix: Sequence[str], stderr: str = "Mock failure", returncode: int = 1) -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self.set_response(prefix, returncode=returncode, stderr=stderr)

    def run(
        self,
        argv: Sequence[str],
        *,
        input: str | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = True,
    ) -> CommandResult:
        argv = list(argv)
        self._calls.append(RecordedCall(
            argv=argv,
            input=input,
            env=dict(env) if env else None,
            capture=capture,
        ))

        for entry in self._candidates():
            if entry.matches(argv):
                entry.used += 1
                self._tools.update(entry.provides)
                self._tools.difference_update(entry.removes)
                return CommandResult(
                    argv=argv,
                    returncode=entry.returncode,
                    stdout=entry.stdout,
                    stderr=entry.stderr,
                    metadata={"mock": True},
                )

        return CommandResult.success(argv, metadata={"mock": True})

    def _candidates(self) -> list[_Scripted]:
        limited = [e for e in self._scripted if e.times is not None]
        unlimited = [e for e in reversed(self._scripted) if e.times is None]
        return limited + unlimited

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._calls.clear()
        self._scripted.clear()
