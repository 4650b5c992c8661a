"""
Extension installer — resolve the extension list, install each one.

Resolution, first non-empty source wins:

    1. ``CODE_SERVER_EXTENSIONS``       whitespace/newline separated ids
    2. ``CODE_SERVER_EXTENSIONS_FILE``  one id per line, ``#`` comments
    3. built-in groups                  core + toggled groups

Installation never stops early: every id is attempted, failures are
tallied and reported in input order.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.models.extension import ExtensionList, ExtensionReport

logger = logging.getLogger(__name__)

# Group → extension ids (Open VSX identifiers).
EXTENSION_GROUPS: dict[str, tuple[str, ...]] = {
    "core": (
        "editorconfig.editorconfig",
        "esbenp.prettier-vscode",
        "eamodio.gitlens",
        "mhutchie.git-graph",
    ),
    "language": (
        "ms-python.python",
        "charliermarsh.ruff",
        "golang.go",
        "rust-lang.rust-analyzer",
        "dbaeumer.vscode-eslint",
    ),
    "ops": (
        "redhat.vscode-yaml",
        "ms-azuretools.vscode-docker",
        "hashicorp.terraform",
        "timonwong.shellcheck",
    ),
    "assistant": (
        "openai.chatgpt",
        "continue.continue",
    ),
}

# Group → config toggle. Groups not listed are always included.
_GROUP_TOGGLES: dict[str, str] = {
    "language": "install_language_extensions",
    "ops": "install_ops_extensions",
    "assistant": "install_assistant_extensions",
}


def parse_inline_extensions(value: str) -> list[str]:
    """Split an inline override on any whitespace, keeping order."""
    return value.split()


def parse_extension_file(path: Path) -> list[str]:
    """Read one id per line.

    Full-line and trailing ``#`` comments are dropped, whitespace is
    trimmed, blank lines are skipped.

    Raises:
        ProvisionError: The file does not exist, cannot be read, or is
            not UTF-8.
    """
    if not path.is_file():
        raise ProvisionError(
            "extensions",
            f"Extensions file not found: {path}",
            hint="Fix CODE_SERVER_EXTENSIONS_FILE or unset it to use the defaults.",
        )
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProvisionError(
            "extensions",
            f"Cannot read {path}: {e}",
            hint="The extensions file must be readable UTF-8 text.",
        ) from e

    ids: list[str] = []
    for line in text.splitlines():
        entry = line.split("#", 1)[0].strip()
        if entry:
            ids.append(entry)
    return ids


def enabled_groups(config: ProvisioningConfig) -> list[str]:
    return [
        group
        for group in EXTENSION_GROUPS
        if group not in _GROUP_TOGGLES or getattr(config, _GROUP_TOGGLES[group])
    ]


def default_extensions(config: ProvisioningConfig) -> list[str]:
    """Built-in list: core plus every toggled-on group, in group order."""
    ids: list[str] = []
    for group in enabled_groups(config):
        ids.extend(EXTENSION_GROUPS[group])
    return ids


def resolve_extensions(config: ProvisioningConfig) -> ExtensionList:
    """Pick the extension list for this run.

    The file is not opened when an inline override is set.
    """
    if config.extensions:
        ids = parse_inline_extensions(config.extensions)
        if ids:
            return ExtensionList(ids=ids, source="inline")

    if config.extensions_file is not None:
        ids = parse_extension_file(config.extensions_file)
        if ids:
            return ExtensionList(ids=ids, source="file", path=config.extensions_file)
        logger.warning("%s lists no extensions; using defaults", config.extensions_file)

    return ExtensionList(ids=default_extensions(config), source="default")


def _scratch_log() -> Path:
    handle = tempfile.NamedTemporaryFile(
        prefix="code-server-extensions-", suffix=".log", delete=False,
    )
    handle.close()
    return Path(handle.name)


def install_extensions(
    runner: CommandRunner,
    editor: str,
    extensions: ExtensionList | list[str],
    log_path: Path | None = None,
) -> ExtensionReport:
    """Install every extension, independently.

    Each attempt's combined output is appended to ``log_path`` (a
    temporary file when not given).
    """
    ids = list(extensions)
    report = ExtensionReport(log_path=log_path or _scratch_log())

    logger.info("Installing %d extensions (log: %s)", len(ids), report.log_path)
    with report.log_path.open("a", encoding="utf-8") as log:
        for ext in ids:
            result = runner.run([editor, "--install-extension", ext])
            log.write(f"==> {ext} (exit {result.returncode})\n")
            if result.combined_output:
                log.write(result.combined_output + "\n")

            if result.ok:
                report.ok.append(ext)
                logger.info("  ✓ %s", ext)
            else:
                report.failed.append(ext)
                logger.warning("  ✗ %s (exit %d)", ext, result.returncode)

    if report.failed:
        logger.warning(
            "%d/%d extensions failed: %s",
            report.failed_count, report.total, ", ".join(report.failed),
        )
    return report
