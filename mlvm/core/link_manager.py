"""
目录链接管理模块。

把不同操作系统创建和删除目录链接的方式封装在同一个接口之后，
调用方通过 get_link_manager() 获取当前平台的实现。
"""

import os
import shutil
import sys
from pathlib import Path
from typing import Optional

from mlvm.core.errors import SymlinkPermissionError
from mlvm.core.interfaces import ILinkManager
from mlvm.utils.logger import get_logger
from mlvm.utils.permission_manager import is_admin, is_developer_mode_enabled

logger = get_logger()

ERROR_PRIVILEGE_NOT_HELD = 1314

WINDOWS_SYMLINK_HELP = (
    "创建符号链接失败，这是权限问题。\n\n"
    "在 Windows 上请任选其一：\n"
    "1. （推荐）开启开发者模式：\n"
    "   设置 > 隐私和安全性 > 开发者选项 > 开启“开发人员模式”。\n"
    "2. 在“以管理员身份运行”的终端中执行此命令。"
)


def _is_link(path: Path) -> bool:
    if os.path.islink(path):
        return True
    isjunction = getattr(os.path, "isjunction", None)
    return bool(isjunction and isjunction(path))


class PosixLinkManager(ILinkManager):
    """POSIX 平台的符号链接实现。"""

    def create_directory_link(self, target: Path, link_path: Path) -> None:
        os.symlink(target, link_path, target_is_directory=True)
        logger.debug(f"已创建符号链接 {link_path} -> {target}")

    def remove_link(self, link_path: Path) -> None:
        """
        删除链接或残留的目录、文件。

        对链接只删除链接本身，不会进入链接指向的安装目录。

        参数:
            link_path: 要删除的路径
        """
        if _is_link(link_path):
            os.unlink(link_path)
        elif link_path.is_dir():
            shutil.rmtree(link_path)
        elif link_path.exists():
            link_path.unlink()

    def read_link(self, link_path: Path) -> Optional[Path]:
        if not _is_link(link_path):
            return None
        return Path(os.readlink(link_path))


class WindowsLinkManager(PosixLinkManager):
    """
    Windows 平台的目录符号链接实现。

    创建目录符号链接需要管理员权限或开启开发者模式，权限不足时抛出
    SymlinkPermissionError 并给出处理建议。
    """

    def create_directory_link(self, target: Path, link_path: Path) -> None:
        try:
            os.symlink(target, link_path, target_is_directory=True)
        except OSError as e:
            if isinstance(e, PermissionError) or getattr(e, "winerror", None) == ERROR_PRIVILEGE_NOT_HELD:
                logger.error(
                    f"创建符号链接被拒绝: {e} "
                    f"(管理员: {is_admin()}, 开发者模式: {is_developer_mode_enabled()})"
                )
                raise SymlinkPermissionError(f"{WINDOWS_SYMLINK_HELP}\n\n原始错误: {e}") from e
            raise
        logger.debug(f"已创建目录符号链接 {link_path} -> {target}")

    def remove_link(self, link_path: Path) -> None:
        # 目录符号链接和 junction 在 Windows 上要用 rmdir 删除
        if _is_link(link_path) and os.path.isdir(link_path):
            os.rmdir(link_path)
        else:
            super().remove_link(link_path)


def get_link_manager(platform: Optional[str] = None) -> ILinkManager:
    """
    获取当前平台的目录链接实现。

    参数:
        platform: 平台标识，默认为 sys.platform

    返回:
        ILinkManager 实例
    """
    platform = platform or sys.platform
    if platform == "win32":
        return WindowsLinkManager()
    return PosixLinkManager()
