"""
Node.js 运行时适配器。

下载地址与压缩包内的顶层目录名都可以直接由版本号和平台推出，无需查询目录。
"""

from typing import Any, Dict, List, Optional, Tuple

from mlvm.core.errors import ResolutionError, UnsupportedPlatformError
from mlvm.core.http_client import REQUEST_ERRORS
from mlvm.core.interfaces import IHttpClient, IRuntimeAdapter
from mlvm.core.models import ArchiveDescriptor, ArchiveKind, PlatformTriple
from mlvm.core.runtimes.host import detect_host
from mlvm.utils.logger import get_logger

logger = get_logger()

DEFAULT_MIRROR = "https://nodejs.org/dist"

OS_NAMES = {
    "windows": "win",
    "macos": "darwin",
    "linux": "linux",
}

ARCH_NAMES = {
    "x86_64": "x64",
    "aarch64": "arm64",
}


class NodeAdapter(IRuntimeAdapter):
    """Node.js 适配器，版本目录名带前缀 v（如 v18.17.1）。"""

    name = "node"

    def __init__(
        self,
        http_client: IHttpClient,
        mirror: str = DEFAULT_MIRROR,
        host: Optional[Tuple[str, str]] = None,
    ):
        self.http_client = http_client
        self.mirror = mirror.rstrip("/")
        self.host = host or detect_host()

    def normalize(self, version: str) -> str:
        version = version.strip()
        return version if version.startswith("v") else f"v{version}"

    def platform_triple(self) -> PlatformTriple:
        host_os, host_arch = self.host
        if host_os not in OS_NAMES or host_arch not in ARCH_NAMES:
            raise UnsupportedPlatformError(
                f"Node.js 不支持当前平台: {host_os} {host_arch}", self.name
            )
        return PlatformTriple(OS_NAMES[host_os], ARCH_NAMES[host_arch])

    def resolve(self, version: str) -> ArchiveDescriptor:
        version = self.normalize(version)
        try:
            triple = self.platform_triple()
        except UnsupportedPlatformError as e:
            raise UnsupportedPlatformError(e.detail, self.name, version) from e
        kind = ArchiveKind.ZIP if triple.os == "win" else ArchiveKind.TAR_GZ
        folder = f"node-{version}-{triple.os}-{triple.arch}"
        return ArchiveDescriptor(
            url=f"{self.mirror}/{version}/{folder}.{kind.value}",
            kind=kind,
            top_level_folder=folder,
        )

    def bin_subdir(self) -> str:
        # Windows 发行包把 node.exe 放在根目录
        return "" if self.host[0] == "windows" else "bin"

    def list_remote(self) -> List[Dict[str, Any]]:
        """
        从 index.json 获取远程版本列表。

        返回:
            版本信息列表，每个元素包含 version、release_date、lts
        """
        try:
            data = self.http_client.get_json(f"{self.mirror}/index.json")
        except REQUEST_ERRORS as e:
            raise ResolutionError(f"获取 Node.js 版本列表失败: {e}", self.name) from e

        versions = []
        for item in data:
            if not isinstance(item, dict) or not item.get("version"):
                continue
            lts = item.get("lts")
            versions.append({
                "version": item["version"],
                "release_date": item.get("date"),
                "lts": lts if isinstance(lts, str) else None,
            })
        logger.debug(f"获取到 {len(versions)} 个 Node.js 版本")
        return versions
