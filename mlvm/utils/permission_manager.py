import ctypes
import os
import sys

from mlvm.utils.logger import get_logger

logger = get_logger()

DEV_MODE_KEY_PATH = r"SOFTWARE\Microsoft\Windows\CurrentVersion\AppModelUnlock"
DEV_MODE_VALUE = "AllowDevelopmentWithoutDevLicense"


def is_admin() -> bool:
    """
    检测当前进程是否具有管理员（或 root）权限。

    Returns:
        bool: 如果具有管理员权限返回 True，否则返回 False
    """
    if sys.platform != "win32":
        return hasattr(os, "geteuid") and os.geteuid() == 0
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        return False


def is_developer_mode_enabled() -> bool:
    """
    检测 Windows 开发者模式是否已开启。

    开启后普通用户也可以创建符号链接。非 Windows 平台始终返回 False。

    Returns:
        bool: 开发者模式已开启返回 True
    """
    if sys.platform != "win32":
        return False

    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, DEV_MODE_KEY_PATH) as key:
            value, _ = winreg.QueryValueEx(key, DEV_MODE_VALUE)
            return bool(value)
    except OSError as e:
        logger.debug(f"读取开发者模式注册表项失败: {e}")
        return False
