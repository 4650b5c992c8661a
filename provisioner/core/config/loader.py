"""
Configuration loader — builds a ProvisioningConfig for one run.

Sources, lowest to highest precedence:

    model defaults  <  YAML file (--config)  <  environment  <  CLI overrides

The YAML file uses the model's field names as keys. Environment
variables keep the names operators already export for the shell
setup script (``CODE_SERVER_PORT``, ``NPM_PREFIX``, ...).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from provisioner.core.models.config import ProvisioningConfig

logger = logging.getLogger(__name__)

# Environment variable → config field
ENV_VARS: dict[str, str] = {
    "CODE_SERVER_BIND_ADDR": "bind_addr",
    "CODE_SERVER_PORT": "port",
    "CODE_SERVER_AUTH": "auth",
    "CODE_SERVER_PASSWORD": "password",
    "CODE_SERVER_INSTALL_URL": "editor_install_url",
    "NPM_PREFIX": "npm_prefix",
    "NODE_MAJOR_MIN": "node_major_min",
    "CLI_PACKAGE": "cli_package",
    "CLI_COMMAND": "cli_command",
    "INSTALL_LANGUAGE_EXTENSIONS": "install_language_extensions",
    "INSTALL_OPS_EXTENSIONS": "install_ops_extensions",
    "INSTALL_ASSISTANT_EXTENSIONS": "install_assistant_extensions",
    "CODE_SERVER_EXTENSIONS": "extensions",
    "CODE_SERVER_EXTENSIONS_FILE": "extensions_file",
    "START_FOREGROUND": "start_foreground",
}

_BOOL_FIELDS = {
    name
    for name, info in ProvisioningConfig.model_fields.items()
    if info.annotation is bool
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when provisioning configuration is invalid or unreadable."""


def parse_bool(value: str, name: str = "value") -> bool:
    """Parse a shell-style boolean (``1/true/yes/on``, ``0/false/no/off``)."""
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name}: expected a boolean (true/false), got {value!r}")


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a plain mapping.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading provisioning config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Accept kebab-case keys too (bind-addr, node-major-min).
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect config values from environment variables.

    Empty values count as unset, like ``${VAR:-default}`` in a shell.
    """
    values: dict[str, Any] = {}
    for var, field_name in ENV_VARS.items():
        raw = env.get(var)
        if raw is None or raw == "":
            continue
        if field_name in _BOOL_FIELDS:
            values[field_name] = parse_bool(raw, var)
        else:
            values[field_name] = raw
    return values


def load_config(
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ProvisioningConfig:
    """Load and validate provisioning configuration.

    Args:
        env: Environment mapping (default: ``os.environ``).
        path: Optional YAML file with field-name keys.
        overrides: Highest-precedence values (CLI flags). ``None``
            values are ignored.

    Returns:
        Validated ProvisioningConfig.

    Raises:
        ConfigError: If any source is unreadable or a value is invalid.
    """
    if env is None:
        env = os.environ

    data: dict[str, Any] = {}
    if path is not None:
        data.update(read_config_file(path))
    data.update(env_overrides(env))
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = ProvisioningConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e

    logger.debug(
        "Config: bind=%s:%d auth=%s node>=%d",
        config.bind_addr, config.port, config.auth, config.node_major_min,
    )
    return config


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "Invalid provisioning configuration: " + "; ".join(parts)
