"""
Bun 运行时适配器。

Bun 的发布标签形如 bun-v1.1.0，版本目录名统一为 v1.1.0。
"""

from typing import Any, Dict, List, Optional, Tuple

from mlvm.core.errors import ResolutionError, UnsupportedPlatformError
from mlvm.core.http_client import REQUEST_ERRORS
from mlvm.core.interfaces import IHttpClient, IRuntimeAdapter
from mlvm.core.models import ArchiveDescriptor, ArchiveKind, PlatformTriple
from mlvm.core.runtimes.host import detect_host
from mlvm.utils.logger import get_logger

logger = get_logger()

DEFAULT_MIRROR = "https://github.com/oven-sh/bun/releases/download"
TAGS_URL = "https://api.github.com/repos/oven-sh/bun/tags"
TAG_PREFIX = "bun-"

PLATFORMS = {
    ("windows", "x86_64"): ("windows", "x64"),
    ("linux", "x86_64"): ("linux", "x64"),
    ("linux", "aarch64"): ("linux", "aarch64"),
    ("macos", "x86_64"): ("darwin", "x64"),
    ("macos", "aarch64"): ("darwin", "aarch64"),
}


class BunAdapter(IRuntimeAdapter):
    name = "bun"

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
        if version.startswith(TAG_PREFIX):
            version = version[len(TAG_PREFIX):]
        return version if version.startswith("v") else f"v{version}"

    def platform_triple(self) -> PlatformTriple:
        entry = PLATFORMS.get(tuple(self.host))
        if entry is None:
            raise UnsupportedPlatformError(
                f"Bun 不支持当前平台: {self.host[0]} {self.host[1]}", self.name
            )
        return PlatformTriple(*entry)

    def resolve(self, version: str) -> ArchiveDescriptor:
        version = self.normalize(version)
        try:
            triple = self.platform_triple()
        except UnsupportedPlatformError as e:
            raise UnsupportedPlatformError(e.detail, self.name, version) from e
        target = f"bun-{triple.os}-{triple.arch}"
        return ArchiveDescriptor(
            url=f"{self.mirror}/{TAG_PREFIX}{version}/{target}.zip",
            kind=ArchiveKind.ZIP,
            top_level_folder=target,
        )

    def bin_subdir(self) -> str:
        # bun 可执行文件位于解压目录根部
        return ""

    def list_remote(self) -> List[Dict[str, Any]]:
        try:
            tags = self.http_client.get_json(TAGS_URL)
        except REQUEST_ERRORS as e:
            raise ResolutionError(f"获取 Bun 版本列表失败: {e}", self.name) from e

        return [
            {"version": self.normalize(tag["name"])}
            for tag in tags
            if isinstance(tag, dict) and str(tag.get("name", "")).startswith(TAG_PREFIX)
        ]
