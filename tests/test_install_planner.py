"""Tests for the install planner."""

import os

import pytest

from mlvm.core.errors import (
    DownloadError,
    FormatError,
    LayoutError,
    RelocationError,
    ResolutionError,
)
from mlvm.core.install_planner import InstallPlanner, SCRATCH_DIR_NAME
from mlvm.utils.input_validator import InputValidationError

from conftest import make_tar_gz, make_zip


class TestInstallPaths:
    """路径计算。"""

    def test_install_path_is_normalized(self, planner, base_dir):
        assert planner.install_path("node", "18.17.1") == base_dir / "node" / "v18.17.1"
        assert planner.install_path("node", "v18.17.1") == base_dir / "node" / "v18.17.1"
        assert planner.install_path("go", "go1.21.0") == base_dir / "go" / "1.21.0"
        assert planner.install_path("bun", "bun-v1.1.0") == base_dir / "bun" / "v1.1.0"

    def test_scratch_path(self, planner, base_dir):
        assert planner.scratch_path("python") == base_dir / "python" / SCRATCH_DIR_NAME

    @pytest.mark.parametrize("version", ["../etc", "", "current", "temp_unpack", "a/b"])
    def test_invalid_version_rejected(self, planner, version):
        with pytest.raises(InputValidationError):
            planner.install_path("node", version)

    def test_settings_drive_rename_retry(self, config_manager, adapters, http_client):
        config_manager.set_value("settings.rename_retry_count", 5)
        config_manager.set_value("settings.rename_retry_delay", 0.1)
        planner = InstallPlanner(config_manager, adapters, http_client)

        assert planner.rename_retry.max_retries == 4
        assert planner.rename_retry.base_delay == 0.1


class TestInstall:
    """完整安装流程。"""

    def test_node_end_to_end(self, planner, http_client, base_dir, node_fixture):
        installed = planner.install("node", "18.17.1")

        final = base_dir / "node" / "v18.17.1"
        assert installed.version == "v18.17.1"
        assert installed.path == final
        assert (final / "bin" / "node").is_file()
        assert (final / "lib" / "node_modules" / "npm" / "package.json").is_file()
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()
        assert http_client.download_calls == [node_fixture]

    def test_already_installed_skips_network(self, planner, http_client, base_dir, node_fixture):
        planner.install("node", "18.17.1")
        marker = base_dir / "node" / "v18.17.1" / "marker"
        marker.write_text("keep")

        installed = planner.install("node", "v18.17.1")

        assert installed.path == base_dir / "node" / "v18.17.1"
        assert marker.read_text() == "keep"
        assert len(http_client.download_calls) == 1
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()

    def test_existing_directory_counts_as_installed(self, planner, http_client, base_dir):
        (base_dir / "go" / "1.21.0").mkdir(parents=True)

        installed = planner.install("go", "go1.21.0")

        assert installed.version == "1.21.0"
        assert http_client.download_calls == []

    def test_stale_scratch_from_crash_is_replaced(self, planner, base_dir, node_fixture):
        stale = base_dir / "node" / SCRATCH_DIR_NAME / "node-v18.17.1-linux-x64"
        stale.mkdir(parents=True)
        (stale / "half-written").write_text("garbage")

        planner.install("node", "18.17.1")

        final = base_dir / "node" / "v18.17.1"
        assert (final / "bin" / "node").is_file()
        assert not (final / "half-written").exists()
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()

    def test_go_install_uses_fixed_top_folder(self, planner, http_client, base_dir):
        url = "https://go.dev/dl/go1.21.0.linux-amd64.tar.gz"
        http_client.payloads[url] = make_tar_gz({"go/bin/go": "#!/bin/sh\n", "go/VERSION": "go1.21.0"})

        installed = planner.install("go", "1.21.0")

        assert installed.path == base_dir / "go" / "1.21.0"
        assert (installed.path / "bin" / "go").is_file()

    def test_bun_zip_install(self, planner, http_client, base_dir):
        url = "https://github.com/oven-sh/bun/releases/download/bun-v1.1.0/bun-linux-x64.zip"
        http_client.payloads[url] = make_zip({"bun-linux-x64/bun": b"bun"})

        installed = planner.install("bun", "1.1.0")

        assert (base_dir / "bun" / "v1.1.0" / "bun").read_bytes() == b"bun"
        assert installed.version == "v1.1.0"

    def test_progress_callback_forwarded(self, planner, node_fixture):
        seen = []
        planner.install("node", "18.17.1", progress_callback=lambda d, t: seen.append((d, t)))
        assert seen and seen[-1][0] == seen[-1][1]


class TestInstallFailures:
    """失败时不留下部分安装。"""

    def test_http_404_raises_download_error(self, planner, http_client, base_dir):
        with pytest.raises(DownloadError) as exc_info:
            planner.install("node", "99.0.0")

        message = str(exc_info.value)
        assert "404" in message
        assert "linux-x64" in message
        assert exc_info.value.runtime == "node"
        assert exc_info.value.version == "v99.0.0"
        assert not (base_dir / "node" / "v99.0.0").exists()
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()

    def test_missing_top_folder_raises_layout_error(self, planner, http_client, base_dir):
        url = "https://nodejs.org/dist/v18.17.1/node-v18.17.1-linux-x64.tar.gz"
        http_client.payloads[url] = make_tar_gz({"something-else/bin/node": "x"})

        with pytest.raises(LayoutError) as exc_info:
            planner.install("node", "18.17.1")

        assert "something-else" in str(exc_info.value)
        assert not (base_dir / "node" / "v18.17.1").exists()
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()

    def test_corrupt_archive_cleans_scratch(self, planner, http_client, base_dir):
        url = "https://nodejs.org/dist/v18.17.1/node-v18.17.1-linux-x64.tar.gz"
        http_client.payloads[url] = b"not a tarball"

        with pytest.raises(FormatError):
            planner.install("node", "18.17.1")

        assert not (base_dir / "node" / "v18.17.1").exists()
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()

    def test_resolution_error_before_download(self, planner, http_client):
        http_client.json["https://api.github.com/repos/astral-sh/python-build-standalone/releases"] = []

        with pytest.raises(ResolutionError):
            planner.install("python", "3.11.9")
        assert http_client.download_calls == []

    def test_rename_retried_then_succeeds(self, planner, base_dir, node_fixture, sleeps, monkeypatch):
        real_rename = os.rename
        failures = []

        def flaky_rename(src, dst):
            if len(failures) < 2:
                failures.append(src)
                raise PermissionError(13, "file is in use")
            return real_rename(src, dst)

        monkeypatch.setattr(os, "rename", flaky_rename)

        installed = planner.install("node", "18.17.1")

        assert (installed.path / "bin" / "node").is_file()
        assert len(failures) == 2
        assert sleeps == [0.5, 0.5]

    def test_rename_exhausted_raises_relocation_error(self, planner, base_dir, node_fixture, sleeps, monkeypatch):
        attempts = []

        def always_busy(src, dst):
            attempts.append(src)
            raise PermissionError(13, "file is in use")

        monkeypatch.setattr(os, "rename", always_busy)

        with pytest.raises(RelocationError):
            planner.install("node", "18.17.1")

        monkeypatch.undo()
        assert len(attempts) == 3
        assert sleeps == [0.5, 0.5]
        assert not (base_dir / "node" / "v18.17.1").exists()
        assert not (base_dir / "node" / SCRATCH_DIR_NAME).exists()

    def test_failed_install_can_be_retried(self, planner, http_client, base_dir, node_fixture):
        good = http_client.payloads[node_fixture]
        http_client.payloads[node_fixture] = 503

        with pytest.raises(DownloadError):
            planner.install("node", "18.17.1")

        http_client.payloads[node_fixture] = good
        installed = planner.install("node", "18.17.1")
        assert (installed.path / "bin" / "node").is_file()
