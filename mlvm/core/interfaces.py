"""
核心模块抽象接口定义。

定义运行时适配器、目录链接、HTTP 客户端和配置管理器的抽象接口。
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from mlvm.core.models import ArchiveDescriptor, PlatformTriple

ProgressCallback = Callable[[int, int], None]


class IConfigManager(ABC):
    """配置管理器抽象接口。"""

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """获取配置字典。"""
        pass

    @abstractmethod
    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """保存配置到文件。"""
        pass

    @abstractmethod
    def get_settings(self) -> dict[str, Any]:
        """获取 settings 配置部分。"""
        pass

    @abstractmethod
    def get_base_dir(self) -> Path:
        """获取 mlvm 基础目录。"""
        pass

    @abstractmethod
    def get_runtime_root(self, runtime: str) -> Path:
        """获取指定运行时的根目录。"""
        pass

    @abstractmethod
    def get_mirror(self, runtime: str) -> str:
        """获取指定运行时的下载镜像地址。"""
        pass


class IHttpClient(ABC):
    """下载与版本目录查询使用的 HTTP 客户端接口。"""

    @abstractmethod
    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET 请求并解析 JSON，非 2xx 状态抛出 HttpStatusError。"""
        pass

    @abstractmethod
    def download(self, url: str, progress_callback: Optional[ProgressCallback] = None) -> bytes:
        """下载完整内容，非 2xx 状态抛出 HttpStatusError。"""
        pass


class ILinkManager(ABC):
    """目录链接能力接口，按操作系统提供不同实现。"""

    @abstractmethod
    def create_directory_link(self, target: Path, link_path: Path) -> None:
        """创建指向 target 的目录链接 link_path。"""
        pass

    @abstractmethod
    def remove_link(self, link_path: Path) -> None:
        """删除 link_path（链接、残留目录或文件）。"""
        pass

    @abstractmethod
    def read_link(self, link_path: Path) -> Optional[Path]:
        """读取链接目标，不是链接时返回 None。"""
        pass


class IRuntimeAdapter(ABC):
    """
    运行时适配器接口。

    每个生态（node、python、go、bun）各有一个实现，自己维护版本规范化规则
    和操作系统/架构命名表。
    """

    name: str

    @abstractmethod
    def normalize(self, version: str) -> str:
        """规范化版本号，对已规范化的版本号返回其本身。"""
        pass

    @abstractmethod
    def platform_triple(self) -> PlatformTriple:
        """返回当前主机在该生态中的 (os, arch) 名称。"""
        pass

    @abstractmethod
    def resolve(self, version: str) -> ArchiveDescriptor:
        """为版本解析出唯一的下载描述。"""
        pass

    @abstractmethod
    def bin_subdir(self) -> str:
        """返回安装目录中存放可执行文件的子目录，空字符串表示根目录。"""
        pass

    @abstractmethod
    def list_remote(self) -> List[Dict[str, Any]]:
        """获取远程可用版本列表。"""
        pass
