"""
安装与切换过程的异常定义。

所有异常都携带运行时名称和版本号，便于重复调用时排查问题。
"""

from typing import Optional


class MlvmError(Exception):
    """mlvm 错误基类。"""

    def __init__(self, message: str, runtime: Optional[str] = None, version: Optional[str] = None):
        self.runtime = runtime
        self.version = version
        self.detail = message
        if runtime and version:
            message = f"[{runtime} {version}] {message}"
        elif runtime:
            message = f"[{runtime}] {message}"
        super().__init__(message)


class ResolutionError(MlvmError):
    """没有与版本和平台匹配的发布包。"""
    pass


class UnsupportedPlatformError(ResolutionError):
    """当前操作系统/架构组合在该生态中没有对应名称。"""
    pass


class DownloadError(MlvmError):
    """下载返回非成功状态。"""
    pass


class FormatError(MlvmError):
    """压缩包格式无法识别或已损坏。"""
    pass


class LayoutError(MlvmError):
    """解压结果中缺少预期的顶层目录。"""
    pass


class RelocationError(MlvmError):
    """重命名到最终安装目录的重试次数已用尽。"""
    pass


class NotInstalledError(MlvmError):
    """要切换的版本尚未安装。"""
    pass


class SymlinkPermissionError(MlvmError, PermissionError):
    """操作系统策略拒绝创建目录链接。"""
    pass
