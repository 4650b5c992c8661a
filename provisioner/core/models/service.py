"""
Service models — systemd unit descriptor and activation outcome.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

TEMPLATED_UNIT = "code-server@.service"
UNIT_DIR = Path("/etc/systemd/system")


class ActivationState(str, Enum):
    """Where the service activator ended up."""

    NO_INIT = "no_init"
    TEMPLATED_UNIT_EXISTS = "templated_unit_exists"
    NO_TEMPLATED_UNIT = "no_templated_unit"


class ServiceUnitDescriptor(BaseModel):
    """Fields interpolated into a per-user code-server unit."""

    user: str
    group: str = ""
    home: Path
    executable: str
    config_path: Path
    restart_sec: int = 5
    extra_path: list[str] = Field(default_factory=list)

    @property
    def unit_name(self) -> str:
        return f"code-server-{self.user}.service"

    @property
    def unit_path(self) -> Path:
        return UNIT_DIR / self.unit_name

    @property
    def effective_group(self) -> str:
        return self.group or self.user


class ServiceActivation(BaseModel):
    """Result of the service activation step."""

    state: ActivationState
    unit_name: str | None = None
    unit_path: Path | None = None

    @property
    def activated(self) -> bool:
        return self.state is not ActivationState.NO_INIT

    def management_commands(self, elevation: str = "sudo ") -> list[str]:
        """Operator commands to inspect and restart the unit."""
        if not self.activated or not self.unit_name:
            return []
        return [
            f"{elevation}systemctl status {self.unit_name}",
            f"{elevation}systemctl restart {self.unit_name}",
        ]

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "activated": self.activated,
            "unit_name": self.unit_name,
            "unit_path": str(self.unit_path) if self.unit_path else None,
        }
