"""
Service activator — keep code-server running under systemd.

States:

    NO_INIT                → warn and skip (no systemctl, or systemd not
                             running, e.g. inside a container)
    TEMPLATED_UNIT_EXISTS  → enable the packaged ``code-server@<user>``
    NO_TEMPLATED_UNIT      → write ``code-server-<user>.service``,
                             daemon-reload, enable

All three are terminal. Presence of ``systemctl`` alone is not enough
to leave NO_INIT: systemd must also report itself as running.
"""

from __future__ import annotations

import logging
from pathlib import Path

from provisioner.adapters.base import CommandRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.models.service import (
    TEMPLATED_UNIT,
    ActivationState,
    ServiceActivation,
    ServiceUnitDescriptor,
)

logger = logging.getLogger(__name__)

SYSTEMCTL = "systemctl"

# ``systemctl is-system-running`` answers that mean systemd is PID 1.
# "offline" is what a container without systemd reports.
_RUNNING_STATES = frozenset({"running", "degraded", "starting", "initializing", "maintenance"})

_SYSTEM_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"

_UNIT_TEMPLATE = """\
[Unit]
Description=code-server for {user}
After=network.target

[Service]
Type=simple
User={user}
Group={group}
Environment=HOME={home}
Environment=PATH={path}
WorkingDirectory={home}
ExecStart={executable} --config {config_path}
Restart=on-failure
RestartSec={restart_sec}

[Install]
WantedBy=multi-user.target
"""


def probe_init_system(runner: CommandRunner) -> bool:
    """Whether systemd is present AND running."""
    if not runner.has(SYSTEMCTL):
        logger.debug("systemctl not on PATH")
        return False

    # Non-zero exit for "degraded" is normal; only the state word matters.
    result = runner.run([SYSTEMCTL, "is-system-running"])
    state = result.first_line.lower()
    if state in _RUNNING_STATES:
        return True

    logger.debug("systemd reports %r; treating as not running", state or result.error)
    return False


def has_templated_unit(runner: CommandRunner) -> bool:
    """Whether the packaged ``code-server@.service`` template is installed."""
    result = runner.run([SYSTEMCTL, "list-unit-files", TEMPLATED_UNIT, "--no-legend"])
    if result.failed:
        return False
    return any(line.split()[0] == TEMPLATED_UNIT for line in result.stdout.splitlines() if line.strip())


def detect_activation_state(runner: CommandRunner) -> ActivationState:
    """Pick the starting state of the activator."""
    if not probe_init_system(runner):
        return ActivationState.NO_INIT
    if has_templated_unit(runner):
        return ActivationState.TEMPLATED_UNIT_EXISTS
    return ActivationState.NO_TEMPLATED_UNIT


def build_descriptor(
    user: str,
    home: Path,
    executable: str,
    config_path: Path,
) -> ServiceUnitDescriptor:
    return ServiceUnitDescriptor(
        user=user,
        home=home,
        executable=executable,
        config_path=config_path,
        extra_path=[str(home / ".local" / "bin")],
    )


def render_unit(descriptor: ServiceUnitDescriptor) -> str:
    """Materialise a unit file from a descriptor."""
    path = ":".join([_SYSTEM_PATH, *descriptor.extra_path])
    return _UNIT_TEMPLATE.format(
        user=descriptor.user,
        group=descriptor.effective_group,
        home=descriptor.home,
        path=path,
        executable=descriptor.executable,
        config_path=descriptor.config_path,
        restart_sec=descriptor.restart_sec,
    )


def _systemctl(runner: CommandRunner, privilege: PrivilegeContext, *args: str) -> None:
    result = runner.run(privilege.wrap([SYSTEMCTL, *args]))
    if result.failed:
        raise ProvisionError(
            "service",
            f"systemctl {' '.join(args)} failed (exit {result.returncode})",
            hint=result.combined_output.strip()[-500:],
        )


def activate_service(
    runner: CommandRunner,
    privilege: PrivilegeContext,
    user: str,
    home: Path,
    executable: str,
    config_path: Path,
) -> ServiceActivation:
    """Run the activation state machine to its terminal state.

    Raises:
        ProvisionError: A systemctl call or the unit write failed.
    """
    state = detect_activation_state(runner)

    if state is ActivationState.NO_INIT:
        logger.warning(
            "systemd is not available or not running; skipping service setup. "
            "Start code-server manually."
        )
        return ServiceActivation(state=state)

    if state is ActivationState.TEMPLATED_UNIT_EXISTS:
        unit = f"code-server@{user}"
        logger.info("Enabling packaged unit %s", unit)
        _systemctl(runner, privilege, "enable", "--now", unit)
        return ServiceActivation(state=state, unit_name=unit)

    descriptor = build_descriptor(user, home, executable, config_path)
    logger.info("Writing systemd unit %s", descriptor.unit_path)
    result = runner.run(
        privilege.wrap(["tee", str(descriptor.unit_path)]),
        input=render_unit(descriptor),
    )
    if result.failed:
        raise ProvisionError(
            "service",
            f"Cannot write {descriptor.unit_path} (exit {result.returncode})",
            hint=result.combined_output.strip()[-500:],
        )

    _systemctl(runner, privilege, "daemon-reload")
    _systemctl(runner, privilege, "enable", "--now", descriptor.unit_name)
    return ServiceActivation(
        state=state,
        unit_name=descriptor.unit_name,
        unit_path=descriptor.unit_path,
    )
