"""
Shell profile — make ``~/.local/bin`` discoverable now and on next login.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from provisioner.adapters.base import CommandRunner

logger = logging.getLogger(__name__)

PROFILE_MARKER = "# added by webide-provisioner"
PATH_EXPORT = 'export PATH="$HOME/.local/bin:$PATH"'

_PROFILE_BY_SHELL = {
    "bash": Path(".bashrc"),
    "zsh": Path(".zshrc"),
    "fish": Path(".config") / "fish" / "config.fish",
}


def shell_config_line(shell_type: str, path_entry: str) -> str:
    """Shell-specific line that puts ``path_entry`` first on PATH."""
    if shell_type == "fish":
        return f"set -gx PATH {path_entry} $PATH"
    return f'export PATH="{path_entry}:$PATH"'


def _shell_name(shell: str | None) -> str:
    if shell is None:
        shell = os.environ.get("SHELL", "")
    return Path(shell).name if shell else ""


def profile_for_shell(home: Path, shell: str | None = None) -> Path:
    """Pick the profile file the user's login shell reads."""
    return home / _PROFILE_BY_SHELL.get(_shell_name(shell), Path(".profile"))


def ensure_user_bin_on_path(
    runner: CommandRunner,
    home: Path,
    shell: str | None = None,
) -> Path | None:
    """Create ``~/.local/bin`` and put it on PATH.

    The runner's PATH is updated for the rest of this run. The shell
    profile gets an export line only if the file already exists and
    does not contain it yet. Profile problems are logged as warnings
    and never stop the run.

    Returns:
        The profile file that was modified, or None.
    """
    user_bin = home / ".local" / "bin"
    user_bin.mkdir(parents=True, exist_ok=True)
    runner.prepend_path(str(user_bin))

    profile = profile_for_shell(home, shell)
    if not profile.is_file():
        logger.debug("Profile %s does not exist; not editing", profile)
        return None

    line = shell_config_line(_shell_name(shell), "$HOME/.local/bin")
    try:
        # Profiles are not guaranteed to be UTF-8; keep foreign bytes intact.
        content = profile.read_text(encoding="utf-8", errors="surrogateescape")
        if line in content:
            return None

        with profile.open("a", encoding="utf-8", errors="surrogateescape") as f:
            if content and not content.endswith("\n"):
                f.write("\n")
            f.write(f"\n{PROFILE_MARKER}\n{line}\n")
    except (OSError, UnicodeError) as e:
        logger.warning("Cannot update %s (%s); add ~/.local/bin to PATH yourself", profile, e)
        return None

    logger.info("Added ~/.local/bin to PATH in %s", profile)
    return profile
