"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from provisioner.adapters.mock import MockRunner
from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.models.privilege import PrivilegeContext


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A throwaway home directory."""
    path = tmp_path / "home" / "alice"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def config(home: Path) -> ProvisioningConfig:
    """Default config pointed at the temp home."""
    return ProvisioningConfig(user="alice", home=home)


@pytest.fixture
def runner() -> MockRunner:
    """A mock host with nothing installed."""
    return MockRunner()


@pytest.fixture
def root() -> PrivilegeContext:
    return PrivilegeContext.root()


@pytest.fixture
def sudo() -> PrivilegeContext:
    return PrivilegeContext.sudo()


def _debian_host(node_version: str = "v22.3.0") -> MockRunner:
    """A Debian-like host where every step succeeds.

    The code-server installer "provides" code-server, npm install
    provides codex, and systemd is running without a templated unit.
    """
    runner = MockRunner(tools=["apt-get", "curl", "sudo", "systemctl", "node", "npm"])
    runner.set_response(["bash", "-c"], provides=["code-server"])
    runner.set_response(["code-server", "--version"], stdout="4.96.4 abc123 with Code 1.96.4\n")
    runner.set_response(["systemctl", "is-system-running"], stdout="running\n")
    runner.set_response(["systemctl", "list-unit-files"], returncode=1, stdout="")
    runner.set_response(["node", "--version"], stdout=f"{node_version}\n")
    runner.set_response(["npm", "config", "get", "prefix"], stdout="/opt/no-such-npm-prefix\n")
    runner.set_response(["npm", "install", "-g"], provides=["codex"])
    runner.set_response(["codex", "--version"], stdout="codex-cli 0.1.0\n")
    return runner


@pytest.fixture
def make_host():
    """Factory for a fully scripted Debian-like host."""
    return _debian_host


@pytest.fixture
def host() -> MockRunner:
    return _debian_host()


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Drop the handlers setup_logging() installs when a test invokes the CLI."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)
