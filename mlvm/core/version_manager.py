"""
版本管理器模块。

作为命令行使用的协调者，把安装、切换、列出本地与远程版本的工作委托给
各个专用模块。
"""

from typing import Any, Dict, List, Optional

from mlvm.core.activation_switch import ActivationSwitch
from mlvm.core.config_manager import ConfigManager
from mlvm.core.http_client import HttpClient
from mlvm.core.install_planner import InstallPlanner
from mlvm.core.interfaces import IHttpClient, ILinkManager, ProgressCallback
from mlvm.core.link_manager import get_link_manager
from mlvm.core.local_manager import LocalManager
from mlvm.core.models import ActivationInfo, InstalledVersion
from mlvm.core.runtimes import RUNTIMES, build_adapters
from mlvm.utils.input_validator import InputValidator, InputValidationError
from mlvm.utils.logger import get_logger

logger = get_logger()


class UnknownRuntimeError(InputValidationError):
    """不支持的运行时名称。"""
    pass


class VersionManager:
    """
    版本管理器类。
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        http_client: Optional[IHttpClient] = None,
        link_manager: Optional[ILinkManager] = None,
        host: Optional[tuple] = None,
    ):
        """
        初始化版本管理器。

        参数:
            config_manager: 配置管理器实例
            http_client: HTTP 客户端，默认根据配置创建
            link_manager: 目录链接实现，默认按当前平台选择
            host: 覆盖检测到的主机 (os, arch)
        """
        self.config_manager = config_manager
        self.http_client = http_client or HttpClient.from_config(config_manager)
        self.adapters = build_adapters(
            self.http_client,
            mirrors={name: config_manager.get_mirror(name) for name in RUNTIMES},
            host=host,
        )
        self.install_planner = InstallPlanner(config_manager, self.adapters, self.http_client)
        self.activation_switch = ActivationSwitch(
            config_manager, self.adapters, link_manager or get_link_manager()
        )
        self.local_manager = LocalManager(config_manager, self.activation_switch)

    def _check_runtime(self, runtime: str) -> str:
        InputValidator.validate_runtime_name(runtime)
        if runtime not in self.adapters:
            raise UnknownRuntimeError(f"未知运行时: {runtime}，可用: {', '.join(RUNTIMES)}")
        return runtime

    def install(
        self,
        runtime: str,
        version: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> InstalledVersion:
        """安装指定版本，已安装时不访问网络。"""
        return self.install_planner.install(self._check_runtime(runtime), version, progress_callback)

    def is_installed(self, runtime: str, version: str) -> bool:
        return self.install_planner.install_path(self._check_runtime(runtime), version).is_dir()

    def use(self, runtime: str, version: str) -> ActivationInfo:
        """切换 current 到指定版本。"""
        return self.activation_switch.activate(self._check_runtime(runtime), version)

    def list_local(self, runtime: str) -> List[Dict[str, Any]]:
        return self.local_manager.scan_local_versions(self._check_runtime(runtime))

    def list_remote(self, runtime: str) -> List[Dict[str, Any]]:
        return self.adapters[self._check_runtime(runtime)].list_remote()

    def get_current_version(self, runtime: str) -> Optional[str]:
        return self.local_manager.get_current_version(self._check_runtime(runtime))
