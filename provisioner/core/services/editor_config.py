"""
Editor config writer — ``~/.config/code-server/config.yaml``.

Field order matches what code-server writes itself. The password
line is emitted only for ``auth: password``; an empty ``password: ""``
under ``auth: none`` is exactly the malformed output this module must
never produce.
"""

from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path

from provisioner.core.errors import ProvisionError
from provisioner.core.models.config import ProvisioningConfig

logger = logging.getLogger(__name__)

CONFIG_MODE = 0o600
PASSWORD_BYTES = 16


@dataclass
class EditorConfigResult:
    """What was written and with which credentials."""

    path: Path
    auth: str
    password: str | None = None
    generated_password: bool = False

    def to_dict(self, show_password: bool = False) -> dict:
        password = self.password
        if password and not show_password:
            password = "********"
        return {
            "path": str(self.path),
            "auth": self.auth,
            "password": password,
            "generated_password": self.generated_password,
        }


def generate_password() -> str:
    """32 hex characters from 16 random bytes."""
    return secrets.token_hex(PASSWORD_BYTES)


def resolve_password(config: ProvisioningConfig) -> tuple[str | None, bool]:
    """Password to write, and whether it was generated just now.

    A configured password is never regenerated, so re-running with the
    same ``CODE_SERVER_PASSWORD`` leaves the file unchanged.
    """
    if config.auth != "password":
        return None, False
    if config.password:
        return config.password, False
    return generate_password(), True


def render_editor_config(config: ProvisioningConfig, password: str | None = None) -> str:
    """Render config.yaml text.

    Args:
        config: Provisioning options.
        password: Password to emit. Ignored unless auth is ``password``.
    """
    lines = [
        f"bind-addr: {config.bind_addr}:{config.port}",
        f"auth: {config.auth}",
    ]
    if config.auth == "password":
        if not password:
            raise ValueError("auth 'password' requires a non-empty password")
        # A JSON string is a valid YAML double-quoted scalar.
        lines.append(f"password: {json.dumps(password)}")
    lines.append("cert: false")
    return "\n".join(lines) + "\n"


def write_editor_config(config: ProvisioningConfig) -> EditorConfigResult:
    """Write config.yaml and force owner-only permissions.

    The file is created with mode 0600 and chmod'ed again after the
    write, so a pre-existing file with looser bits is tightened too.

    Raises:
        ProvisionError: The file or its directory cannot be written.
    """
    password, generated = resolve_password(config)
    text = render_editor_config(config, password)

    path = config.config_file
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.chmod(path, CONFIG_MODE)
    except OSError as e:
        raise ProvisionError(
            "config",
            f"Cannot write {path}: {e.strerror or e}",
            hint=f"Check that {path.parent} is a directory owned by {config.user}.",
        ) from e

    if generated:
        logger.info("Generated a code-server password (shown in the summary)")
    logger.info("Wrote code-server config: %s", path)
    return EditorConfigResult(
        path=path,
        auth=config.auth,
        password=password,
        generated_password=generated,
    )
