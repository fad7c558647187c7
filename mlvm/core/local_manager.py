"""
本地版本管理模块。

扫描运行时根目录下已安装的版本。目录存在与否是“是否已安装”的唯一依据，
不维护额外的清单文件。
"""

import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from mlvm.core.activation_switch import ActivationSwitch, CURRENT_LINK_NAME
from mlvm.core.install_planner import SCRATCH_DIR_NAME
from mlvm.core.interfaces import IConfigManager
from mlvm.core import version_utils
from mlvm.utils.logger import get_logger

logger = get_logger()

IGNORED_ENTRIES = {CURRENT_LINK_NAME, SCRATCH_DIR_NAME}


class LocalManager:
    """
    本地版本管理器类。
    """

    def __init__(self, config_manager: IConfigManager, activation_switch: ActivationSwitch):
        """
        初始化本地版本管理器。

        参数:
            config_manager: 配置管理器实例
            activation_switch: 用于读取 current 指向的版本切换器
        """
        self.config_manager = config_manager
        self.activation_switch = activation_switch

    def scan_local_versions(self, runtime: str) -> List[Dict[str, Any]]:
        """
        扫描本地已安装的版本。

        参数:
            runtime: 运行时名称

        返回:
            版本信息列表（降序），每个元素包含 version、path、install_date、current
        """
        root = self.config_manager.get_runtime_root(runtime)
        if not root.is_dir():
            logger.debug(f"{runtime} 的根目录不存在: {root}")
            return []

        current = self.activation_switch.current_version(runtime)
        versions = []
        for entry in os.scandir(root):
            if entry.name in IGNORED_ENTRIES or entry.is_symlink() or not entry.is_dir():
                continue
            install_date = datetime.fromtimestamp(entry.stat().st_mtime).isoformat()
            versions.append({
                "version": entry.name,
                "path": entry.path,
                "install_date": install_date,
                "current": entry.name == current,
            })

        logger.debug(f"找到 {len(versions)} 个 {runtime} 本地版本")
        return version_utils.sort_versions_desc(versions)

    def get_current_version(self, runtime: str) -> Optional[str]:
        return self.activation_switch.current_version(runtime)
