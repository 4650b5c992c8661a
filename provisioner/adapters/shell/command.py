"""
Subprocess runner — execute host commands and capture their output.

This is the SINGLE PLACE where ``subprocess.run`` is called. All
logging and error capture for external commands is centralised here.
No timeout is applied: a hung installer hangs the run.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence

from provisioner.adapters.base import CommandRunner, prepend_to_path
from provisioner.core.models.command import CommandResult

logger = logging.getLogger(__name__)


class SubprocessRunner(CommandRunner):
    """Run commands on the local host.

    Keeps its own copy of the environment so PATH changes made during
    a run (``~/.local/bin``, the npm prefix) are visible to later
    steps without touching the parent shell.
    """

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._env: dict[str, str] = dict(os.environ if environ is None else environ)

    @property
    def name(self) -> str:
        return "subprocess"

    @property
    def environ(self) -> dict[str, str]:
        return self._env

    def which(self, tool: str) -> str | None:
        return shutil.which(tool, path=self._env.get("PATH", os.defpath))

    def prepend_path(self, directory: str) -> None:
        self._env["PATH"] = prepend_to_path(self._env.get("PATH", ""), directory)

    def run(
        self,
        argv: Sequence[str],
        *,
        input: str | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = True,
    ) -> CommandResult:
        argv = list(argv)
        if not argv:
            return CommandResult(argv=[], returncode=2, error="Empty command")

        run_env = dict(self._env)
        if env:
            run_env.update(env)

        # Resolve against our PATH, not the interpreter's.
        executable = shutil.which(argv[0], path=run_env.get("PATH", os.defpath))
        if executable is None and os.sep not in argv[0]:
            logger.debug("Not on PATH: %s", argv[0])
            return CommandResult.not_found(argv)

        logger.debug("Executing: %s", " ".join(argv))
        start = time.monotonic()

        try:
            if capture:
                result = subprocess.run(
                    [executable or argv[0], *argv[1:]],
                    capture_output=True,
                    text=True,
                    input=input,
                    env=run_env,
                )
            else:
                result = subprocess.run(
                    [executable or argv[0], *argv[1:]],
                    text=True,
                    input=input,
                    env=run_env,
                )
        except FileNotFoundError:
            return CommandResult.not_found(argv)
        except OSError as e:
            logger.warning("Cannot execute %s: %s", argv[0], e)
            return CommandResult(argv=argv, returncode=126, error=f"Command execution error: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode != 0:
            logger.debug("Exit %d after %dms: %s", result.returncode, elapsed_ms, " ".join(argv))

        return CommandResult(
            argv=argv,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            metadata={"duration_ms": elapsed_ms},
        )
