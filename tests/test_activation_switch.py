"""Tests for the activation switch and link managers."""

import os
import sys
from pathlib import Path

import pytest

from mlvm.core.activation_switch import ActivationSwitch, CURRENT_LINK_NAME
from mlvm.core.errors import NotInstalledError, SymlinkPermissionError
from mlvm.core.link_manager import (
    PosixLinkManager,
    WindowsLinkManager,
    get_link_manager,
)
from mlvm.core.runtimes import build_adapters

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="需要 POSIX 符号链接")


@pytest.fixture
def switch(config_manager, adapters):
    return ActivationSwitch(config_manager, adapters, PosixLinkManager())


def install_fake(base_dir: Path, runtime: str, version: str) -> Path:
    path = base_dir / runtime / version
    (path / "bin").mkdir(parents=True)
    (path / "bin" / runtime).write_text(version)
    return path


class TestActivate:
    """切换 current 链接。"""

    def test_creates_current_link(self, switch, base_dir):
        target = install_fake(base_dir, "node", "v18.17.1")

        info = switch.activate("node", "18.17.1")

        link = base_dir / "node" / CURRENT_LINK_NAME
        assert link.is_symlink()
        assert Path(os.readlink(link)) == target.absolute()
        assert info.version == "v18.17.1"
        assert info.link_path == link
        assert info.bin_path == link / "bin"
        assert (info.bin_path / "node").read_text() == "v18.17.1"

    def test_pointer_follows_last_activation(self, switch, base_dir):
        for version in ("v16.20.0", "v18.17.1", "v20.5.0"):
            install_fake(base_dir, "node", version)

        for version in ("v16.20.0", "v20.5.0", "v18.17.1", "v20.5.0"):
            switch.activate("node", version)
            assert switch.current_version("node") == version

    def test_reactivating_same_version(self, switch, base_dir):
        install_fake(base_dir, "go", "1.21.0")

        switch.activate("go", "go1.21.0")
        switch.activate("go", "1.21.0")

        assert switch.current_version("go") == "1.21.0"
        assert (base_dir / "go" / "1.21.0" / "bin" / "go").is_file()

    def test_not_installed(self, switch, base_dir):
        install_fake(base_dir, "node", "v18.17.1")
        switch.activate("node", "18.17.1")

        with pytest.raises(NotInstalledError) as exc_info:
            switch.activate("node", "20.0.0")

        assert "mlvm node install 20.0.0" in str(exc_info.value)
        assert switch.current_version("node") == "v18.17.1"

    def test_stray_directory_replaced(self, switch, base_dir):
        install_fake(base_dir, "python", "3.11.9")
        stray = base_dir / "python" / CURRENT_LINK_NAME
        stray.mkdir(parents=True)
        (stray / "leftover").write_text("x")

        switch.activate("python", "3.11.9")

        assert stray.is_symlink()
        assert switch.current_version("python") == "3.11.9"

    def test_stray_file_replaced(self, switch, base_dir):
        install_fake(base_dir, "bun", "v1.1.0")
        (base_dir / "bun" / CURRENT_LINK_NAME).write_text("not a link")

        info = switch.activate("bun", "1.1.0")

        assert info.link_path.is_symlink()
        assert info.bin_path == info.link_path

    def test_removing_link_keeps_previous_install(self, switch, base_dir):
        old = install_fake(base_dir, "node", "v16.20.0")
        install_fake(base_dir, "node", "v18.17.1")

        switch.activate("node", "16.20.0")
        switch.activate("node", "18.17.1")

        assert (old / "bin" / "node").read_text() == "v16.20.0"

    def test_remove_failure_is_ignored(self, config_manager, adapters, base_dir):
        class StubbornLinkManager(PosixLinkManager):
            def remove_link(self, link_path):
                raise OSError("busy")

        switch = ActivationSwitch(config_manager, adapters, StubbornLinkManager())
        install_fake(base_dir, "node", "v18.17.1")

        switch.activate("node", "18.17.1")
        assert switch.current_version("node") == "v18.17.1"

    def test_windows_bin_path(self, config_manager, http_client, base_dir):
        adapters = build_adapters(http_client, host=("windows", "x86_64"))
        switch = ActivationSwitch(config_manager, adapters, PosixLinkManager())
        install_fake(base_dir, "node", "v18.17.1")
        install_fake(base_dir, "go", "1.21.0")

        assert switch.activate("node", "18.17.1").bin_path == base_dir / "node" / "current"
        assert switch.activate("go", "1.21.0").bin_path == base_dir / "go" / "current" / "bin"


class TestCurrentVersion:
    """读取 current 指向的版本。"""

    def test_unset(self, switch):
        assert switch.current_version("node") is None

    def test_dangling_link(self, switch, base_dir):
        target = install_fake(base_dir, "node", "v18.17.1")
        switch.activate("node", "18.17.1")
        (target / "bin" / "node").unlink()
        (target / "bin").rmdir()
        target.rmdir()

        assert switch.current_version("node") is None

    def test_relative_link(self, switch, base_dir):
        install_fake(base_dir, "go", "1.21.0")
        os.symlink("1.21.0", base_dir / "go" / CURRENT_LINK_NAME)

        assert switch.current_version("go") == "1.21.0"


class TestWindowsLinkManager:
    """Windows 上的权限错误处理。"""

    def test_permission_denied_translated(self, config_manager, adapters, base_dir, monkeypatch):
        def denied(*args, **kwargs):
            raise PermissionError(1, "A required privilege is not held by the client")

        monkeypatch.setattr(os, "symlink", denied)
        switch = ActivationSwitch(config_manager, adapters, WindowsLinkManager())
        install_fake(base_dir, "node", "v18.17.1")

        with pytest.raises(SymlinkPermissionError) as exc_info:
            switch.activate("node", "18.17.1")

        error = exc_info.value
        assert isinstance(error, PermissionError)
        assert error.runtime == "node"
        assert error.version == "v18.17.1"
        assert "开发者模式" in str(error)
        assert "管理员" in str(error)

    def test_privilege_not_held_winerror(self, tmp_path, monkeypatch):
        def denied(*args, **kwargs):
            error = OSError("A required privilege is not held by the client")
            error.winerror = 1314
            raise error

        monkeypatch.setattr(os, "symlink", denied)

        with pytest.raises(SymlinkPermissionError):
            WindowsLinkManager().create_directory_link(tmp_path, tmp_path / "current")

    def test_other_errors_propagate(self, tmp_path, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError(2, "No such file or directory")

        monkeypatch.setattr(os, "symlink", missing)

        with pytest.raises(FileNotFoundError):
            WindowsLinkManager().create_directory_link(tmp_path, tmp_path / "current")

    def test_get_link_manager(self):
        assert isinstance(get_link_manager("win32"), WindowsLinkManager)
        assert type(get_link_manager("linux")) is PosixLinkManager
