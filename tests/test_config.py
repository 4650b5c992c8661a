"""
Tests for the config model, the loader and the config check use case.
"""

from pathlib import Path

import pytest

from provisioner.core.config.loader import (
    ConfigError,
    env_overrides,
    load_config,
    parse_bool,
    read_config_file,
)
from provisioner.core.models.config import ProvisioningConfig
from provisioner.core.use_cases.config_check import check_config

# ── Model Tests ──────────────────────────────────────────────────────


class TestProvisioningConfig:
    def test_defaults(self, tmp_path: Path):
        cfg = ProvisioningConfig(user="alice", home=tmp_path)
        assert cfg.bind_addr == "127.0.0.1"
        assert cfg.port == 8080
        assert cfg.auth == "none"
        assert cfg.password is None
        assert cfg.node_major_min == 22
        assert cfg.cli_package == "@openai/codex"
        assert cfg.cli_command == "codex"
        assert cfg.install_language_extensions
        assert cfg.install_ops_extensions
        assert cfg.install_assistant_extensions
        assert not cfg.start_foreground

    def test_derived_paths(self, tmp_path: Path):
        cfg = ProvisioningConfig(user="alice", home=tmp_path)
        assert cfg.config_file == tmp_path / ".config" / "code-server" / "config.yaml"
        assert cfg.user_bin == tmp_path / ".local" / "bin"
        assert cfg.effective_npm_prefix == tmp_path / ".local"

    def test_npm_prefix_override(self, tmp_path: Path):
        cfg = ProvisioningConfig(user="alice", home=tmp_path, npm_prefix=tmp_path / "npm")
        assert cfg.effective_npm_prefix == tmp_path / "npm"

    def test_blank_password_is_unset(self, tmp_path: Path):
        cfg = ProvisioningConfig(user="alice", home=tmp_path, password="   ")
        assert cfg.password is None

    def test_port_range(self, tmp_path: Path):
        with pytest.raises(ValueError):
            ProvisioningConfig(user="alice", home=tmp_path, port=70000)

    def test_auth_choices(self, tmp_path: Path):
        with pytest.raises(ValueError):
            ProvisioningConfig(user="alice", home=tmp_path, auth="token")

    def test_blank_cli_command_rejected(self, tmp_path: Path):
        with pytest.raises(ValueError):
            ProvisioningConfig(user="alice", home=tmp_path, cli_command=" ")

    @pytest.mark.parametrize("value", ["127.0.0.1\nauth: password", "127.0.0.1 extra", "127.0.0.1\x00"])
    def test_bind_addr_single_token(self, tmp_path: Path, value):
        with pytest.raises(ValueError):
            ProvisioningConfig(user="alice", home=tmp_path, bind_addr=value)

    def test_bind_addr_surrounding_whitespace_stripped(self, tmp_path: Path):
        assert ProvisioningConfig(user="alice", home=tmp_path, bind_addr=" 0.0.0.0 ").bind_addr == "0.0.0.0"

    def test_masked(self, tmp_path: Path):
        cfg = ProvisioningConfig(user="alice", home=tmp_path, auth="password", password="s3cret")
        data = cfg.masked()
        assert data["password"] == "********"
        assert data["home"] == str(tmp_path)

    def test_masked_without_password(self, tmp_path: Path):
        assert ProvisioningConfig(user="alice", home=tmp_path).masked()["password"] is None


# ── Loader Tests ─────────────────────────────────────────────────────


class TestParseBool:
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_false(self, value):
        assert parse_bool(value) is False

    def test_invalid(self):
        with pytest.raises(ConfigError, match="START_FOREGROUND"):
            parse_bool("maybe", "START_FOREGROUND")


class TestReadConfigFile:
    def test_missing(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            read_config_file(tmp_path / "nope.yml")

    def test_empty(self, tmp_path: Path):
        f = tmp_path / "empty.yml"
        f.write_text("")
        assert read_config_file(f) == {}

    def test_not_a_mapping(self, tmp_path: Path):
        f = tmp_path / "list.yml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            read_config_file(f)

    def test_invalid_yaml(self, tmp_path: Path):
        f = tmp_path / "bad.yml"
        f.write_text("port: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            read_config_file(f)

    def test_kebab_case_keys(self, tmp_path: Path):
        f = tmp_path / "c.yml"
        f.write_text("bind-addr: 0.0.0.0\nnode-major-min: 20\n")
        assert read_config_file(f) == {"bind_addr": "0.0.0.0", "node_major_min": 20}


class TestEnvOverrides:
    def test_maps_names(self):
        values = env_overrides({
            "CODE_SERVER_PORT": "9000",
            "CODE_SERVER_AUTH": "password",
            "NPM_PREFIX": "/opt/npm",
            "UNRELATED": "x",
        })
        assert values == {"port": "9000", "auth": "password", "npm_prefix": "/opt/npm"}

    def test_empty_is_unset(self):
        assert env_overrides({"CODE_SERVER_PASSWORD": ""}) == {}

    def test_booleans_parsed(self):
        values = env_overrides({"INSTALL_OPS_EXTENSIONS": "no", "START_FOREGROUND": "1"})
        assert values == {"install_ops_extensions": False, "start_foreground": True}

    def test_bad_boolean(self):
        with pytest.raises(ConfigError):
            env_overrides({"INSTALL_LANGUAGE_EXTENSIONS": "perhaps"})


class TestLoadConfig:
    def test_env_only(self, tmp_path: Path):
        cfg = load_config(env={"CODE_SERVER_PORT": "9000", "NODE_MAJOR_MIN": "20"})
        assert cfg.port == 9000
        assert cfg.node_major_min == 20

    def test_precedence(self, tmp_path: Path):
        f = tmp_path / "c.yml"
        f.write_text("port: 8000\nbind_addr: 0.0.0.0\nauth: password\n")
        cfg = load_config(
            env={"CODE_SERVER_PORT": "9000"},
            path=f,
            overrides={"port": 9500, "auth": None},
        )
        assert cfg.port == 9500
        assert cfg.bind_addr == "0.0.0.0"
        assert cfg.auth == "password"

    def test_unknown_yaml_key(self, tmp_path: Path):
        f = tmp_path / "c.yml"
        f.write_text("prot: 8000\n")
        with pytest.raises(ConfigError, match="prot"):
            load_config(env={}, path=f)

    def test_invalid_port(self):
        with pytest.raises(ConfigError, match="port"):
            load_config(env={"CODE_SERVER_PORT": "not-a-port"})

    def test_invalid_auth(self):
        with pytest.raises(ConfigError, match="Invalid provisioning configuration"):
            load_config(env={"CODE_SERVER_AUTH": "token"})

    def test_bind_addr_newline_from_env(self):
        with pytest.raises(ConfigError, match="bind_addr"):
            load_config(env={"CODE_SERVER_BIND_ADDR": "127.0.0.1\nauth: password"})

    def test_paths_become_paths(self, tmp_path: Path):
        cfg = load_config(env={"CODE_SERVER_EXTENSIONS_FILE": str(tmp_path / "ext.txt")})
        assert cfg.extensions_file == tmp_path / "ext.txt"


# ── Config Check Tests ───────────────────────────────────────────────


def _write(tmp_path: Path, text: str) -> Path:
    f = tmp_path / "provision.yml"
    f.write_text(text)
    return f


class TestCheckConfig:
    def test_valid_defaults(self, tmp_path: Path):
        result = check_config(config_path=_write(tmp_path, f"home: {tmp_path}\nuser: alice\n"), env={})
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_unreadable_config_is_error(self, tmp_path: Path):
        result = check_config(config_path=tmp_path / "missing.yml", env={})
        assert not result.valid
        assert result.config is None
        assert "not found" in result.errors[0]

    def test_public_bind_without_auth_warns(self, tmp_path: Path):
        result = check_config(env={"CODE_SERVER_BIND_ADDR": "0.0.0.0"})
        assert result.valid
        assert any("0.0.0.0" in w for w in result.warnings)

    def test_password_with_auth_none_warns(self):
        result = check_config(env={"CODE_SERVER_PASSWORD": "x"})
        assert any("will not be written" in w for w in result.warnings)

    def test_missing_extensions_file_is_error(self, tmp_path: Path):
        result = check_config(env={"CODE_SERVER_EXTENSIONS_FILE": str(tmp_path / "none.txt")})
        assert not result.valid
        assert "Extensions file not found" in result.errors[0]

    def test_inline_and_file_warns_without_reading_file(self, tmp_path: Path):
        result = check_config(env={
            "CODE_SERVER_EXTENSIONS": "ms-python.python",
            "CODE_SERVER_EXTENSIONS_FILE": str(tmp_path / "none.txt"),
        })
        assert result.valid
        assert any("inline list wins" in w for w in result.warnings)

    def test_to_dict_masks_password(self):
        result = check_config(env={"CODE_SERVER_AUTH": "password", "CODE_SERVER_PASSWORD": "pw"})
        data = result.to_dict()
        assert data["valid"]
        assert data["config"]["password"] == "********"
