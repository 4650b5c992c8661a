"""
Tests for rendering and writing code-server's config.yaml.
"""

import stat
from pathlib import Path

import pytest
import yaml

from provisioner.core.errors import ProvisionError
from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.services.editor_config import (
    generate_password,
    render_editor_config,
    resolve_password,
    write_editor_config,
)


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestRender:
    def test_auth_none(self, config: ProvisioningConfig):
        text = render_editor_config(config)
        assert text == "bind-addr: 127.0.0.1:8080\nauth: none\ncert: false\n"

    def test_auth_password(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password", port=9000)
        data = yaml.safe_load(render_editor_config(cfg, "hunter2"))
        assert data == {"bind-addr": "127.0.0.1:9000", "auth": "password", "password": "hunter2", "cert": False}

    def test_password_with_yaml_specials(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password")
        tricky = 'a: "b" # c \\ d'
        assert yaml.safe_load(render_editor_config(cfg, tricky))["password"] == tricky

    def test_password_requires_value(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password")
        with pytest.raises(ValueError):
            render_editor_config(cfg, None)

    def test_password_ignored_for_auth_none(self, config: ProvisioningConfig):
        assert "password" not in render_editor_config(config, "unused")


class TestResolvePassword:
    def test_auth_none(self, config: ProvisioningConfig):
        assert resolve_password(config) == (None, False)

    def test_supplied_is_kept(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password", password="mine")
        assert resolve_password(cfg) == ("mine", False)

    def test_generated(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password")
        password, generated = resolve_password(cfg)
        assert generated
        assert len(password) == 32
        int(password, 16)

    def test_generate_password_is_random(self):
        assert generate_password() != generate_password()


class TestWriteEditorConfig:
    def test_auth_none_has_no_password_key(self, config: ProvisioningConfig):
        result = write_editor_config(config)
        data = yaml.safe_load(config.config_file.read_text())
        assert "password" not in data
        assert data["auth"] == "none"
        assert data["bind-addr"] == "127.0.0.1:8080"
        assert data["cert"] is False
        assert result.password is None
        assert not result.generated_password

    def test_generated_password_written(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password")
        result = write_editor_config(cfg)
        data = yaml.safe_load(cfg.config_file.read_text())
        assert result.generated_password
        assert data["password"] == result.password
        assert len(data["password"]) == 32
        assert all(c in "0123456789abcdef" for c in data["password"])

    def test_supplied_password_unchanged(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password", password="correct horse")
        result = write_editor_config(cfg)
        assert yaml.safe_load(cfg.config_file.read_text())["password"] == "correct horse"
        assert not result.generated_password

    def test_mode_0600(self, config: ProvisioningConfig):
        write_editor_config(config)
        assert _mode(config.config_file) == 0o600

    def test_directory_in_place_of_file_is_fatal(self, config: ProvisioningConfig):
        config.config_file.mkdir(parents=True)
        with pytest.raises(ProvisionError) as exc:
            write_editor_config(config)
        assert exc.value.step == "config"
        assert str(config.config_file) in exc.value.message

    def test_mode_tightened_on_existing_file(self, config: ProvisioningConfig):
        config.config_dir.mkdir(parents=True)
        config.config_file.write_text("stale: true\n")
        config.config_file.chmod(0o644)

        write_editor_config(config)

        assert _mode(config.config_file) == 0o600
        assert "stale" not in config.config_file.read_text()

    def test_rerun_is_stable(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password", password="same")
        write_editor_config(cfg)
        first = cfg.config_file.read_text()
        write_editor_config(cfg)
        assert cfg.config_file.read_text() == first

    def test_to_dict_masks_by_default(self, home: Path):
        cfg = ProvisioningConfig(user="alice", home=home, auth="password", password="pw")
        result = write_editor_config(cfg)
        assert result.to_dict()["password"] == "********"
        assert result.to_dict(show_password=True)["password"] == "pw"
