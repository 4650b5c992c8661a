"""
Config check use case — validate provisioning configuration and report issues.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from provisioner.core.config.loader import ConfigError, load_config
from provisioner.core.models.config import ProvisioningConfig

_LOOPBACK = {"127.0.0.1", "localhost", "::1"}


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: ProvisioningConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "config": self.config.masked() if self.config else None,
        }


def check_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ConfigCheckResult:
    """Validate provisioning configuration and report issues.

    Args:
        config_path: Optional YAML config file.
        env: Environment mapping (default: ``os.environ``).

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult(config_path=config_path)

    try:
        config = load_config(env=env, path=config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Semantic checks
    if config.auth == "none" and config.bind_addr not in _LOOPBACK:
        result.warnings.append(
            f"auth is 'none' but code-server binds to {config.bind_addr}; "
            "anyone who can reach the port gets a shell."
        )

    if config.auth == "none" and config.password:
        result.warnings.append("A password is set but auth is 'none'; it will not be written.")

    if config.extensions and config.extensions_file is not None:
        result.warnings.append(
            "Both an inline extension list and an extensions file are set; "
            "the inline list wins and the file is ignored."
        )
    elif config.extensions_file is not None and not config.extensions_file.is_file():
        result.errors.append(f"Extensions file not found: {config.extensions_file}")

    result.valid = len(result.errors) == 0
    return result
