"""
mlvm 核心模块。

提供下载解压、安装规划、版本切换和各运行时适配器。
"""

from .interfaces import IConfigManager, IHttpClient, ILinkManager, IRuntimeAdapter
from .errors import (
    MlvmError, ResolutionError, UnsupportedPlatformError, DownloadError, FormatError,
    LayoutError, RelocationError, NotInstalledError, SymlinkPermissionError,
)
from .models import ArchiveKind, ArchiveDescriptor, PlatformTriple, InstalledVersion, ActivationInfo
from .config_manager import ConfigManager, ConfigValidationError, ConfigSaveError
from .http_client import HttpClient, HttpClientError, HttpStatusError
from .archive_extractor import ArchiveExtractor
from .link_manager import get_link_manager, PosixLinkManager, WindowsLinkManager
from .install_planner import InstallPlanner
from .activation_switch import ActivationSwitch
from .local_manager import LocalManager
from .env_manager import EnvManager
from .version_manager import VersionManager, UnknownRuntimeError
from . import version_utils

__all__ = [
    "IConfigManager", "IHttpClient", "ILinkManager", "IRuntimeAdapter",
    "MlvmError", "ResolutionError", "UnsupportedPlatformError", "DownloadError", "FormatError",
    "LayoutError", "RelocationError", "NotInstalledError", "SymlinkPermissionError",
    "ArchiveKind", "ArchiveDescriptor", "PlatformTriple", "InstalledVersion", "ActivationInfo",
    "ConfigManager", "ConfigValidationError", "ConfigSaveError",
    "HttpClient", "HttpClientError", "HttpStatusError",
    "ArchiveExtractor",
    "get_link_manager", "PosixLinkManager", "WindowsLinkManager",
    "InstallPlanner",
    "ActivationSwitch",
    "LocalManager",
    "EnvManager",
    "VersionManager", "UnknownRuntimeError",
    "version_utils",
]
