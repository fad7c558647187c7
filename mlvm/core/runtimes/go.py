"""
Go 运行时适配器。

Go 的发行包都解压出名为 go 的顶层目录，版本目录名不带 go 前缀。
"""

from typing import Any, Dict, List, Optional, Tuple

from mlvm.core.errors import ResolutionError, UnsupportedPlatformError
from mlvm.core.http_client import REQUEST_ERRORS
from mlvm.core.interfaces import IHttpClient, IRuntimeAdapter
from mlvm.core.models import ArchiveDescriptor, ArchiveKind, PlatformTriple
from mlvm.core.runtimes.host import detect_host
from mlvm.utils.logger import get_logger

logger = get_logger()

DEFAULT_MIRROR = "https://go.dev/dl"
CATALOG_URL = "https://go.dev/dl/"

PLATFORMS = {
    ("windows", "x86_64"): ("windows", "amd64", ArchiveKind.ZIP),
    ("windows", "x86"): ("windows", "386", ArchiveKind.ZIP),
    ("linux", "x86_64"): ("linux", "amd64", ArchiveKind.TAR_GZ),
    ("linux", "aarch64"): ("linux", "arm64", ArchiveKind.TAR_GZ),
    ("macos", "x86_64"): ("darwin", "amd64", ArchiveKind.TAR_GZ),
    ("macos", "aarch64"): ("darwin", "arm64", ArchiveKind.TAR_GZ),
}


class GoAdapter(IRuntimeAdapter):
    name = "go"

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
        while version.startswith("go"):
            version = version[2:]
        return version

    def _platform(self) -> Tuple[str, str, ArchiveKind]:
        entry = PLATFORMS.get(tuple(self.host))
        if entry is None:
            raise UnsupportedPlatformError(
                f"Go 不支持当前平台: {self.host[0]} {self.host[1]}", self.name
            )
        return entry

    def platform_triple(self) -> PlatformTriple:
        go_os, go_arch, _ = self._platform()
        return PlatformTriple(go_os, go_arch)

    def resolve(self, version: str) -> ArchiveDescriptor:
        version = self.normalize(version)
        try:
            go_os, go_arch, kind = self._platform()
        except UnsupportedPlatformError as e:
            raise UnsupportedPlatformError(e.detail, self.name, version) from e
        return ArchiveDescriptor(
            url=f"{self.mirror}/go{version}.{go_os}-{go_arch}.{kind.value}",
            kind=kind,
            top_level_folder="go",
        )

    def bin_subdir(self) -> str:
        return "bin"

    def list_remote(self) -> List[Dict[str, Any]]:
        """
        获取远程版本列表（go.dev 默认只返回最新两个版本，需要 include=all）。

        返回:
            版本信息列表，每个元素包含 version、stable
        """
        try:
            data = self.http_client.get_json(CATALOG_URL, params={"mode": "json", "include": "all"})
        except REQUEST_ERRORS as e:
            raise ResolutionError(f"获取 Go 版本列表失败: {e}", self.name) from e

        return [
            {"version": self.normalize(item["version"]), "stable": bool(item.get("stable"))}
            for item in data
            if isinstance(item, dict) and item.get("version")
        ]
