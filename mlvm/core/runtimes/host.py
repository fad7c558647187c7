"""
主机平台检测。

只把 platform 模块的原始值统一为通用名称（windows/linux/macos，
x86_64/aarch64/x86）；各生态自己的命名由对应适配器维护。
"""

import platform
from typing import Optional, Tuple

_OS_ALIASES = {
    "windows": "windows",
    "linux": "linux",
    "darwin": "macos",
}

_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
}


def detect_host(system: Optional[str] = None, machine: Optional[str] = None) -> Tuple[str, str]:
    """
    获取当前主机的 (os, arch)。

    无法识别的值原样（小写）返回，由适配器决定是否支持。

    参数:
        system: platform.system() 的值，默认自动检测
        machine: platform.machine() 的值，默认自动检测

    返回:
        (os, arch) 元组
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    return _OS_ALIASES.get(system, system), _ARCH_ALIASES.get(machine, machine)
