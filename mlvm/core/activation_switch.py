"""
版本切换模块。

把运行时根目录下的 current 链接重新指向某个已安装版本。current 是整个
数据模型中唯一可变的状态，安装过程从不触碰它。
"""

from pathlib import Path
from typing import Dict, Optional

from mlvm.core.errors import NotInstalledError, SymlinkPermissionError
from mlvm.core.interfaces import IConfigManager, ILinkManager, IRuntimeAdapter
from mlvm.core.models import ActivationInfo
from mlvm.utils.input_validator import InputValidator
from mlvm.utils.logger import get_logger

logger = get_logger()

CURRENT_LINK_NAME = "current"


class ActivationSwitch:
    """
    版本切换器。

    切换流程为：确认目标版本已安装 -> 尽力删除旧的 current -> 创建新链接。
    重复切换到当前版本同样会执行删除再创建。
    """

    def __init__(
        self,
        config_manager: IConfigManager,
        adapters: Dict[str, IRuntimeAdapter],
        link_manager: ILinkManager,
    ):
        """
        初始化版本切换器。

        参数:
            config_manager: 配置管理器实例
            adapters: 运行时名称到适配器的映射
            link_manager: 当前平台的目录链接实现
        """
        self.config_manager = config_manager
        self.adapters = adapters
        self.link_manager = link_manager

    def _adapter(self, runtime: str) -> IRuntimeAdapter:
        adapter = self.adapters.get(runtime)
        if adapter is None:
            raise KeyError(f"未知运行时: {runtime}")
        return adapter

    def current_link_path(self, runtime: str) -> Path:
        return self.config_manager.get_runtime_root(runtime) / CURRENT_LINK_NAME

    def activate(self, runtime: str, version: str) -> ActivationInfo:
        """
        切换运行时的当前版本。

        参数:
            runtime: 运行时名称
            version: 版本号（会先规范化）

        返回:
            ActivationInfo，其中 bin_path 为需要加入 PATH 的目录

        抛出:
            NotInstalledError: 目标版本未安装
            SymlinkPermissionError: 操作系统拒绝创建链接
        """
        adapter = self._adapter(runtime)
        InputValidator.validate_version_string(version)
        normalized = adapter.normalize(version)
        InputValidator.validate_version_string(normalized)

        root = self.config_manager.get_runtime_root(runtime)
        target = (root / normalized).absolute()
        if not target.is_dir():
            raise NotInstalledError(
                f"版本未安装，请先运行 `mlvm {runtime} install {version}`",
                runtime, normalized,
            )

        link_path = root / CURRENT_LINK_NAME
        logger.info(f"正在切换 {runtime} 到版本 {normalized}")
        self._remove_existing(link_path)

        try:
            self.link_manager.create_directory_link(target, link_path)
        except SymlinkPermissionError as e:
            raise SymlinkPermissionError(str(e), runtime, normalized) from e

        bin_subdir = adapter.bin_subdir()
        bin_path = link_path / bin_subdir if bin_subdir else link_path
        logger.info(f"已切换 {runtime} 到版本 {normalized}，可执行文件目录: {bin_path}")
        return ActivationInfo(
            runtime=runtime,
            version=normalized,
            target=target,
            link_path=link_path,
            bin_path=bin_path,
        )

    def _remove_existing(self, link_path: Path) -> None:
        # 尽力删除：后续创建链接这一步才是权威检查
        try:
            self.link_manager.remove_link(link_path)
        except OSError as e:
            logger.debug(f"删除旧的 current 失败（忽略）: {e}")

    def current_version(self, runtime: str) -> Optional[str]:
        """
        读取 current 链接指向的版本号。

        参数:
            runtime: 运行时名称

        返回:
            版本号，未设置或目标已不存在时返回 None
        """
        link_path = self.current_link_path(runtime)
        try:
            target = self.link_manager.read_link(link_path)
        except OSError as e:
            logger.warning(f"读取 {link_path} 失败: {e}")
            return None
        if target is None:
            return None
        if not target.is_absolute():
            target = link_path.parent / target
        if not target.is_dir():
            logger.warning(f"{runtime} 的 current 指向不存在的目录: {target}")
            return None
        return target.name
