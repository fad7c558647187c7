"""Pytest configuration and shared fixtures."""

import gzip
import io
import os
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Optional, Union

# 日志在导入时初始化，必须先把基础目录指向临时目录
os.environ["MLVM_HOME"] = tempfile.mkdtemp(prefix="mlvm-test-home-")

import pytest
import zstandard

from mlvm.core.config_manager import ConfigManager
from mlvm.core.http_client import HttpStatusError
from mlvm.core.install_planner import InstallPlanner
from mlvm.core.interfaces import IHttpClient
from mlvm.core.runtimes import build_adapters

LINUX_X64 = ("linux", "x86_64")

FileSpec = Union[bytes, str]


def make_tar(files: Dict[str, FileSpec], symlinks: Optional[Dict[str, str]] = None) -> bytes:
    """Build an uncompressed tar; values ending in '/' are directories, exec bits for bin/."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, content in files.items():
            if name.endswith("/"):
                info = tarfile.TarInfo(name.rstrip("/"))
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
                continue
            data = content.encode() if isinstance(content, str) else content
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755 if "/bin/" in name else 0o644
            tar.addfile(info, io.BytesIO(data))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
    return buf.getvalue()


def make_tar_gz(files: Dict[str, FileSpec], symlinks: Optional[Dict[str, str]] = None) -> bytes:
    return gzip.compress(make_tar(files, symlinks))


def make_tar_zst(files: Dict[str, FileSpec]) -> bytes:
    return zstandard.ZstdCompressor().compress(make_tar(files))


def make_zip(files: Dict[str, FileSpec], modes: Optional[Dict[str, int]] = None) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            data = content.encode() if isinstance(content, str) else content
            info = zipfile.ZipInfo(name)
            mode = (modes or {}).get(name)
            if mode is not None:
                info.external_attr = mode << 16
            zf.writestr(info, data)
    return buf.getvalue()


class StubHttpClient(IHttpClient):
    """In-memory HTTP collaborator: URL -> bytes / JSON, or an int status for failures."""

    def __init__(self):
        self.payloads: Dict[str, Union[bytes, int]] = {}
        self.json: Dict[str, object] = {}
        self.download_calls = []
        self.json_calls = []

    def get_json(self, url, params=None):
        self.json_calls.append((url, params))
        key = url
        if params:
            key = url + "?" + "&".join(f"{k}={v}" for k, v in sorted(params.items()))
        if key in self.json:
            return self.json[key]
        if url in self.json:
            return self.json[url]
        raise HttpStatusError(url, 404)

    def download(self, url, progress_callback=None):
        self.download_calls.append(url)
        payload = self.payloads.get(url, 404)
        if isinstance(payload, int):
            raise HttpStatusError(url, payload)
        if progress_callback:
            progress_callback(len(payload), len(payload))
        return payload


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    return tmp_path / ".mlvm"


@pytest.fixture
def config_manager(base_dir: Path) -> ConfigManager:
    return ConfigManager(base_dir=base_dir)


@pytest.fixture
def http_client() -> StubHttpClient:
    return StubHttpClient()


@pytest.fixture
def adapters(http_client: StubHttpClient):
    return build_adapters(http_client, host=LINUX_X64)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def planner(config_manager, adapters, http_client, sleeps) -> InstallPlanner:
    return InstallPlanner(config_manager, adapters, http_client, sleep=sleeps.append)


@pytest.fixture
def node_fixture(http_client: StubHttpClient) -> str:
    """Register the node v18.17.1 linux-x64 tarball with the stub client and return its URL."""
    url = "https://nodejs.org/dist/v18.17.1/node-v18.17.1-linux-x64.tar.gz"
    http_client.payloads[url] = make_tar_gz({
        "node-v18.17.1-linux-x64/bin/node": "#!/bin/sh\necho v18.17.1\n",
        "node-v18.17.1-linux-x64/lib/node_modules/npm/package.json": '{"name": "npm"}',
        "node-v18.17.1-linux-x64/README.md": "node",
    })
    return url
