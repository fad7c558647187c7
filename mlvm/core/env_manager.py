"""
环境变量检查模块。

只读取 PATH 并生成设置说明，从不修改进程或系统的环境变量。
"""

import os
import sys
from pathlib import Path
from typing import List, Optional

from mlvm.utils.logger import get_logger

logger = get_logger()


class EnvManager:
    """
    PATH 检查器类。
    """

    def __init__(self, environ: Optional[dict] = None, platform: Optional[str] = None):
        """
        初始化 PATH 检查器。

        参数:
            environ: 环境变量映射，默认为 os.environ
            platform: 平台标识，默认为 sys.platform
        """
        self.environ = os.environ if environ is None else environ
        self.platform = platform or sys.platform

    @property
    def is_windows(self) -> bool:
        return self.platform == "win32"

    def _normalize(self, entry: str) -> str:
        entry = entry.strip().rstrip("\\/")
        return entry.lower() if self.is_windows else entry

    def get_path_entries(self) -> List[str]:
        """
        获取 PATH 环境变量的所有条目。

        返回:
            PATH 条目列表
        """
        separator = ";" if self.is_windows else ":"
        path_value = self.environ.get("PATH", "")
        return [e.strip() for e in path_value.split(separator) if e.strip()]

    def path_contains(self, entry: str) -> bool:
        """
        检查 PATH 是否包含指定条目。

        参数:
            entry: 要检查的路径条目

        返回:
            包含返回 True，否则返回 False
        """
        if not entry or not entry.strip():
            return False
        target = self._normalize(entry)
        return any(self._normalize(e) == target for e in self.get_path_entries())

    def path_instructions(self, bin_path: Path) -> List[str]:
        """
        生成把 bin_path 加入 PATH 的说明。

        参数:
            bin_path: 需要加入 PATH 的目录

        返回:
            说明文本行列表，PATH 已包含该目录时只有一行提示
        """
        bin_str = str(bin_path)
        if self.path_contains(bin_str):
            return [f"PATH 已包含 {bin_str}"]

        if self.is_windows:
            return [
                f"请将以下目录加入 PATH: {bin_str}",
                "PowerShell 中可执行:",
                f'  $env:PATH = "{bin_str};" + $env:PATH',
                "如需永久生效，请把上面这行加入 PowerShell 配置文件，然后重启终端。",
            ]
        return [
            f"请将以下目录加入 PATH: {bin_str}",
            "在 shell 中可执行:",
            f'  export PATH="{bin_str}:$PATH"',
            "如需永久生效，请把上面这行加入 ~/.bashrc 或 ~/.zshrc，然后重启终端。",
        ]
