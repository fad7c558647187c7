"""
Python 运行时适配器。

使用 python-build-standalone 的 install_only 构建。同一个 Python 版本会有
多个构建日期，解析时从最新的发布开始查找第一个匹配当前平台的构建；
只给出次版本号（如 3.11）时选择其中最新的补丁版本。
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from mlvm.core.errors import ResolutionError, UnsupportedPlatformError
from mlvm.core.http_client import REQUEST_ERRORS
from mlvm.core.interfaces import IHttpClient, IRuntimeAdapter
from mlvm.core.models import ArchiveDescriptor, ArchiveKind, PlatformTriple
from mlvm.core.runtimes.host import detect_host
from mlvm.core import version_utils
from mlvm.utils.logger import get_logger

logger = get_logger()

DEFAULT_MIRROR = "https://api.github.com/repos/astral-sh/python-build-standalone"
RELEASES_PER_PAGE = 10
MAX_RELEASE_PAGES = 5

OS_NAMES = {
    "linux": "unknown-linux-gnu",
    "macos": "apple-darwin",
    "windows": "pc-windows-msvc",
}

ARCH_NAMES = {
    "x86_64": "x86_64",
    "aarch64": "aarch64",
}

ASSET_PATTERN = re.compile(
    r"^cpython-(?P<version>\d+\.\d+\.\d+)\+(?P<build>\d+)-(?P<target>.+)"
    r"-install_only\.(?P<ext>tar\.gz|tar\.zst)$"
)


class PythonAdapter(IRuntimeAdapter):
    """Python 适配器，版本目录名不带前缀（如 3.11.9）。"""

    name = "python"

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
        while version.startswith("v"):
            version = version[1:]
        return version

    def platform_triple(self) -> PlatformTriple:
        host_os, host_arch = self.host
        if host_os not in OS_NAMES or host_arch not in ARCH_NAMES:
            raise UnsupportedPlatformError(
                f"python-build-standalone 不支持当前平台: {host_os} {host_arch}", self.name
            )
        return PlatformTriple(OS_NAMES[host_os], ARCH_NAMES[host_arch])

    def target(self) -> str:
        """返回构建名称中使用的目标三元组，如 x86_64-unknown-linux-gnu。"""
        triple = self.platform_triple()
        return f"{triple.arch}-{triple.os}"

    def _fetch_releases(self, page: int, version: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            data = self.http_client.get_json(
                f"{self.mirror}/releases",
                params={"per_page": RELEASES_PER_PAGE, "page": page},
            )
        except REQUEST_ERRORS as e:
            raise ResolutionError(f"获取 python-build-standalone 发布列表失败: {e}", self.name, version) from e
        return data if isinstance(data, list) else []

    def _matching_assets(self, release: Dict[str, Any], version: str, target: str) -> List[Dict[str, Any]]:
        matches = []
        for asset in release.get("assets", []):
            m = ASSET_PATTERN.match(asset.get("name", ""))
            if not m or m.group("target") != target:
                continue
            if not version_utils.matches_prefix(version, m.group("version")):
                continue
            matches.append({
                "version": m.group("version"),
                "build": m.group("build"),
                "ext": m.group("ext"),
                "url": asset.get("browser_download_url", ""),
            })
        return matches

    def resolve(self, version: str) -> ArchiveDescriptor:
        """
        在发布列表中查找匹配版本和平台的 install_only 构建。

        参数:
            version: 完整版本号或次版本号

        返回:
            ArchiveDescriptor

        抛出:
            ResolutionError: 没有找到匹配的构建
        """
        version = self.normalize(version)
        try:
            target = self.target()
        except UnsupportedPlatformError as e:
            raise UnsupportedPlatformError(e.detail, self.name, version) from e
        logger.info(f"查找 Python {version} 在 {target} 上的构建")

        for page in range(1, MAX_RELEASE_PAGES + 1):
            releases = self._fetch_releases(page, version)
            if not releases:
                break
            for release in releases:
                matches = self._matching_assets(release, version, target)
                if not matches:
                    continue
                best = max(
                    matches,
                    key=lambda a: (
                        version_utils.parse_version(a["version"]),
                        a["build"],
                        a["ext"] == "tar.zst",
                    ),
                )
                logger.info(f"找到构建 {best['version']}+{best['build']}: {best['url']}")
                return ArchiveDescriptor(
                    url=best["url"],
                    kind=ArchiveKind.from_filename(best["url"]),
                    top_level_folder="python",
                )

        raise ResolutionError(
            f"找不到适用于平台 {target} 的 Python 构建", self.name, version
        )

    def bin_subdir(self) -> str:
        return "" if self.host[0] == "windows" else "bin"

    def list_remote(self) -> List[Dict[str, Any]]:
        """
        从最新一页发布中收集当前平台可用的 Python 版本。

        返回:
            版本信息列表（降序），每个元素包含 version、build
        """
        target = self.target()
        seen: Dict[str, Dict[str, Any]] = {}
        for release in self._fetch_releases(1):
            for asset in release.get("assets", []):
                m = ASSET_PATTERN.match(asset.get("name", ""))
                if m and m.group("target") == target and m.group("version") not in seen:
                    seen[m.group("version")] = {
                        "version": m.group("version"),
                        "build": m.group("build"),
                    }
        return version_utils.sort_versions_desc(list(seen.values()))
