"""
Provisioning configuration — everything a run needs to know up front.

Built fresh on every run from defaults, an optional YAML file and the
environment (see ``provisioner.core.config.loader``). Nothing here is
persisted except the code-server config file rendered from it.
"""

from __future__ import annotations

import getpass
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EDITOR_INSTALL_URL = "https://code-server.dev/install.sh"
DEFAULT_CLI_PACKAGE = "@openai/codex"
DEFAULT_CLI_COMMAND = "codex"
DEFAULT_NODE_MAJOR = 22


def _current_user() -> str:
    user = os.environ.get("USER") or os.environ.get("LOGNAME")
    if user:
        return user
    return getpass.getuser()


class ProvisioningConfig(BaseModel):
    """Options for a single provisioning run."""

    model_config = ConfigDict(extra="forbid")

    # ── code-server ─────────────────────────────────────────────
    bind_addr: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    auth: Literal["none", "password"] = "none"
    password: str | None = None
    editor_install_url: str = DEFAULT_EDITOR_INSTALL_URL

    # ── Host identity ───────────────────────────────────────────
    user: str = Field(default_factory=_current_user)
    home: Path = Field(default_factory=Path.home)

    # ── Runtime + CLI ───────────────────────────────────────────
    node_major_min: int = Field(default=DEFAULT_NODE_MAJOR, ge=1)
    npm_prefix: Path | None = None
    cli_package: str = DEFAULT_CLI_PACKAGE
    cli_command: str = DEFAULT_CLI_COMMAND

    # ── Extensions ──────────────────────────────────────────────
    install_language_extensions: bool = True
    install_ops_extensions: bool = True
    install_assistant_extensions: bool = True
    extensions: str | None = None
    extensions_file: Path | None = None

    # ── Run control ─────────────────────────────────────────────
    start_foreground: bool = False
    skip_packages: bool = False
    skip_service: bool = False
    skip_cli: bool = False
    skip_extensions: bool = False

    @field_validator("password", "extensions", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("bind_addr", "user", "cli_package", "cli_command")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("bind_addr")
    @classmethod
    def _single_token(cls, value: str) -> str:
        # Interpolated into config.yaml as-is; a newline would add keys.
        if any(c.isspace() or not c.isprintable() for c in value):
            raise ValueError("must not contain whitespace or control characters")
        return value

    @property
    def config_dir(self) -> Path:
        return self.home / ".config" / "code-server"

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.yaml"

    @property
    def user_bin(self) -> Path:
        return self.home / ".local" / "bin"

    @property
    def effective_npm_prefix(self) -> Path:
        """Where npm installs global packages when not running as root."""
        return self.npm_prefix if self.npm_prefix is not None else self.home / ".local"

    def masked(self) -> dict:
        """JSON-friendly dump with the password hidden."""
        data = self.model_dump(mode="json")
        if data.get("password"):
            data["password"] = "********"
        return data
