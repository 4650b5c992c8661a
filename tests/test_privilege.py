"""
Tests for the privilege context and its resolution.
"""

import pytest

from provisioner.adapters.mock import MockRunner
from provisioner.core.errors import ProvisionError
from provisioner.core.models.privilege import PrivilegeContext
from provisioner.core.services.privilege import resolve_privilege

# ── Model Tests ──────────────────────────────────────────────────────


class TestPrivilegeContext:
    def test_root_wrap_is_identity(self):
        assert PrivilegeContext.root().wrap(["apt-get", "install"]) == ["apt-get", "install"]

    def test_sudo_wrap(self):
        assert PrivilegeContext.sudo().wrap(["tee", "/etc/x"]) == ["sudo", "tee", "/etc/x"]

    def test_shell_elevation(self):
        assert PrivilegeContext.root().shell_elevation() == ""
        assert PrivilegeContext.root().shell_elevation(preserve_env=True) == ""
        assert PrivilegeContext.sudo().shell_elevation() == "sudo "
        assert PrivilegeContext.sudo().shell_elevation(preserve_env=True) == "sudo -E "

    def test_frozen(self):
        ctx = PrivilegeContext.sudo()
        with pytest.raises(Exception):
            ctx.is_root = True


# ── Resolution Tests ─────────────────────────────────────────────────


class TestResolvePrivilege:
    def test_root(self):
        ctx = resolve_privilege(MockRunner(), euid=0)
        assert ctx.is_root
        assert ctx.prefix == ()

    def test_root_does_not_need_sudo(self):
        runner = MockRunner()
        resolve_privilege(runner, euid=0)
        assert runner.call_count == 0

    def test_sudo(self):
        ctx = resolve_privilege(MockRunner(tools=["sudo"]), euid=1000)
        assert not ctx.is_root
        assert ctx.prefix == ("sudo",)

    def test_no_sudo_is_fatal(self):
        with pytest.raises(ProvisionError) as exc:
            resolve_privilege(MockRunner(), euid=1000)
        assert exc.value.step == "privilege"
        assert "sudo" in exc.value.message
        assert exc.value.hint
