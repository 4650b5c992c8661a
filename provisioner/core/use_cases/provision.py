"""
Provision use case — the whole run, step by step.

This is the top-level orchestrator: privilege → packages → editor →
config → service → runtime → CLI → extensions. Steps run strictly in
order; a fatal error stops the run where it happened and nothing that
already completed is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.command import CommandResult
from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.models.extension import ExtensionList, ExtensionReport
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.models.service import ServiceActivation
from provisioner.core.services.cli_tool import CliInstall, install_cli
from provisioner.core.services.editor import EDITOR_COMMAND, EditorInstall, install_editor
from provisioner.core.services.editor_config import EditorConfigResult, write_editor_config
from provisioner.core.services.extensions import install_extensions, resolve_extensions
from provisioner.core.services.packages import install_base_packages
from provisioner.core.services.privilege import resolve_privilege
from provisioner.core.services.report import build_next_steps
from provisioner.core.services.runtime import RuntimeStatus, ensure_node_runtime
from provisioner.core.services.service_unit import activate_service

logger = logging.getLogger(__name__)


class _WarningCollector(logging.Handler):
    """Collects WARNING records emitted while a run is in progress."""

    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@dataclass
class ProvisionResult:
    """Result of a provisioning run."""

    config: ProvisioningConfig
    privilege: PrivilegeContext | None = None
    package_manager: str | None = None
    editor: EditorInstall | None = None
    editor_config: EditorConfigResult | None = None
    service: ServiceActivation | None = None
    runtime: RuntimeStatus | None = None
    cli: CliInstall | None = None
    extension_list: ExtensionList | None = None
    extensions: ExtensionReport | None = None
    completed_steps: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    failed_step: str | None = None
    hint: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def password(self) -> str | None:
        return self.editor_config.password if self.editor_config else None

    def next_steps(self) -> list[str]:
        return build_next_steps(
            self.config,
            activation=self.service,
            password=self.password,
            privilege=self.privilege,
            extensions=self.extensions,
            cli_found=self.cli.found if self.cli else True,
        )

    def to_dict(self, show_password: bool = True) -> dict:
        result: dict = {
            "ok": self.ok,
            "completed_steps": list(self.completed_steps),
            "warnings": list(self.warnings),
        }
        if self.error:
            result["error"] = {
                "step": self.failed_step,
                "message": self.error,
                "hint": self.hint,
            }
        if self.privilege is not None:
            result["privilege"] = {
                "is_root": self.privilege.is_root,
                "prefix": list(self.privilege.prefix),
            }
        result["package_manager"] = self.package_manager
        if self.editor:
            result["editor"] = self.editor.to_dict()
        if self.editor_config:
            result["config"] = self.editor_config.to_dict(show_password=show_password)
        if self.service:
            result["service"] = self.service.to_dict()
        if self.runtime:
            result["runtime"] = self.runtime.to_dict()
        if self.cli:
            result["cli"] = self.cli.to_dict()
        if self.extension_list:
            result["extension_source"] = self.extension_list.source
        if self.extensions:
            result["extensions"] = self.extensions.to_dict()
        return result


def _run_steps(result: ProvisionResult, runner: CommandRunner, euid: int | None) -> None:
    config = result.config

    privilege = resolve_privilege(runner, euid=euid)
    result.privilege = privilege
    result.completed_steps.append("privilege")

    if config.skip_packages:
        logger.info("Skipping base packages")
    else:
        result.package_manager = install_base_packages(runner, privilege)
        result.completed_steps.append("packages")

    result.editor = install_editor(runner, config.editor_install_url, config.home)
    result.completed_steps.append("editor")

    result.editor_config = write_editor_config(config)
    result.completed_steps.append("config")

    if config.skip_service:
        logger.info("Skipping service activation")
    else:
        result.service = activate_service(
            runner,
            privilege,
            user=config.user,
            home=config.home,
            executable=result.editor.executable,
            config_path=config.config_file,
        )
        result.completed_steps.append("service")

    if config.skip_cli:
        logger.info("Skipping Node.js and %s", config.cli_package)
    else:
        result.runtime = ensure_node_runtime(runner, privilege, config.node_major_min)
        result.completed_steps.append("runtime")

        result.cli = install_cli(
            runner,
            privilege,
            package=config.cli_package,
            command=config.cli_command,
            npm_prefix=config.effective_npm_prefix,
        )
        result.completed_steps.append("cli")

    if config.skip_extensions:
        logger.info("Skipping extensions")
    else:
        result.extension_list = resolve_extensions(config)
        logger.info(
            "Extensions: %d from %s", len(result.extension_list), result.extension_list.source,
        )
        result.extensions = install_extensions(
            runner, result.editor.executable, result.extension_list,
        )
        result.completed_steps.append("extensions")


def run_provision(
    config: ProvisioningConfig,
    runner: CommandRunner,
    euid: int | None = None,
) -> ProvisionResult:
    """Provision the host.

    Args:
        config: Options for this run.
        runner: Where commands execute.
        euid: Effective user id override (default: the real one).

    Returns:
        ProvisionResult. ``error`` / ``failed_step`` are set when a
        fatal precondition stopped the run.
    """
    result = ProvisionResult(config=config)

    collector = _WarningCollector()
    package_logger = logging.getLogger("provisioner")
    previous_level = package_logger.level
    if package_logger.getEffectiveLevel() > logging.WARNING:
        # --quiet must not hide warnings from the result.
        package_logger.setLevel(logging.WARNING)
    package_logger.addHandler(collector)
    try:
        _run_steps(result, runner, euid)
    except ProvisionError as e:
        logger.error("%s", e)
        result.error = e.message
        result.failed_step = e.step
        result.hint = e.hint or None
    finally:
        package_logger.removeHandler(collector)
        package_logger.setLevel(previous_level)
        result.warnings = collector.messages

    return result


def run_extensions_only(config: ProvisioningConfig, runner: CommandRunner) -> ExtensionReport:
    """Install extensions into an already-installed code-server.

    Raises:
        ProvisionError: code-server is not on PATH, or the extensions
            file is missing.
    """
    runner.prepend_path(str(config.user_bin))
    editor = runner.which(EDITOR_COMMAND)
    if editor is None:
        raise ProvisionError(
            "extensions",
            "code-server is not on PATH",
            hint="Run 'provision run' first.",
        )
    return install_extensions(runner, editor, resolve_extensions(config))


def start_foreground(
    runner: CommandRunner,
    config: ProvisioningConfig,
    editor: str = EDITOR_COMMAND,
) -> CommandResult:
    """Run code-server in the foreground until it exits."""
    logger.info("Starting code-server in the foreground (Ctrl+C to stop)")
    return runner.run([editor, "--config", str(config.config_file)], capture=False)
