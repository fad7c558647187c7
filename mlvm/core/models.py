"""
核心数据模型。
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ArchiveKind(str, Enum):
    """支持的压缩包类型。"""

    ZIP = "zip"
    TAR_GZ = "tar.gz"
    TAR_ZST = "tar.zst"

    @classmethod
    def from_filename(cls, filename: str) -> "ArchiveKind":
        """
        根据文件名后缀推断压缩包类型。

        参数:
            filename: 文件名或 URL

        返回:
            ArchiveKind

        抛出:
            ValueError: 后缀无法识别
        """
        lowered = filename.lower()
        for kind in (cls.TAR_ZST, cls.TAR_GZ, cls.ZIP):
            if lowered.endswith("." + kind.value):
                return kind
        if lowered.endswith(".tgz"):
            return cls.TAR_GZ
        raise ValueError(f"无法识别的压缩包类型: {filename}")


@dataclass(frozen=True)
class PlatformTriple:
    """某个生态自己的 (os, arch) 命名。"""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"


@dataclass(frozen=True)
class ArchiveDescriptor:
    """一次安装使用的下载地址、压缩包类型和顶层目录名。"""

    url: str
    kind: ArchiveKind
    top_level_folder: str


@dataclass(frozen=True)
class InstalledVersion:
    runtime: str
    version: str
    path: Path


@dataclass(frozen=True)
class ActivationInfo:
    """切换结果；bin_path 是需要加入 PATH 的目录。"""

    runtime: str
    version: str
    target: Path
    link_path: Path
    bin_path: Path
