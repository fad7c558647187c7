"""
安装规划模块。

把请求的版本号变成一个已校验、幂等安装的目录：

1. 规范化版本号；最终目录已存在则直接返回，不访问网络。
2. 由运行时适配器解析下载描述，下载压缩包。
3. 清理上次残留的 temp_unpack，解压到新的 temp_unpack。
4. 找到描述中声明的顶层目录，一次重命名到最终目录（唯一的提交点）。
5. 无论成功与否都删除 temp_unpack。

最终目录从不被逐步写入，因此观察者只会看到“不存在”或“完整”两种状态。
"""

import os
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional

import requests

from mlvm.core.archive_extractor import ArchiveExtractor
from mlvm.core.errors import DownloadError, LayoutError, RelocationError
from mlvm.core.http_client import HttpStatusError
from mlvm.core.interfaces import IConfigManager, IHttpClient, IRuntimeAdapter, ProgressCallback
from mlvm.core.models import InstalledVersion
from mlvm.utils.input_validator import InputValidator
from mlvm.utils.logger import get_logger
from mlvm.utils.retry import RetryHandler

logger = get_logger()

SCRATCH_DIR_NAME = "temp_unpack"
DEFAULT_RENAME_ATTEMPTS = 3
DEFAULT_RENAME_DELAY = 0.5


class InstallPlanner:
    """
    安装规划器。

    负责计算目标路径与临时路径、保证幂等，并驱动下载、解压和重命名。
    """

    def __init__(
        self,
        config_manager: IConfigManager,
        adapters: Dict[str, IRuntimeAdapter],
        http_client: IHttpClient,
        extractor: Optional[ArchiveExtractor] = None,
        rename_attempts: Optional[int] = None,
        rename_delay: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        初始化安装规划器。

        参数:
            config_manager: 配置管理器实例
            adapters: 运行时名称到适配器的映射
            http_client: 下载使用的 HTTP 客户端
            extractor: 压缩包解压器
            rename_attempts: 重命名总尝试次数，默认读取配置（3）
            rename_delay: 重命名重试间隔（秒），默认读取配置（0.5）
            sleep: 重试等待函数，测试时可替换
        """
        self.config_manager = config_manager
        self.adapters = adapters
        self.http_client = http_client
        self.extractor = extractor or ArchiveExtractor()

        settings = config_manager.get_settings()
        if rename_attempts is None:
            rename_attempts = settings.get("rename_retry_count", DEFAULT_RENAME_ATTEMPTS)
        if rename_delay is None:
            rename_delay = settings.get("rename_retry_delay", DEFAULT_RENAME_DELAY)
        self.rename_retry = RetryHandler.fixed(
            attempts=rename_attempts,
            delay=rename_delay,
            retry_on=(OSError,),
            sleep=sleep,
        )

    def _adapter(self, runtime: str) -> IRuntimeAdapter:
        adapter = self.adapters.get(runtime)
        if adapter is None:
            raise KeyError(f"未知运行时: {runtime}")
        return adapter

    def install_path(self, runtime: str, version: str) -> Path:
        """
        计算版本的最终安装目录。

        参数:
            runtime: 运行时名称
            version: 版本号（会先规范化）

        返回:
            <运行时根目录>/<规范化版本号>
        """
        InputValidator.validate_version_string(version)
        normalized = self._adapter(runtime).normalize(version)
        InputValidator.validate_version_string(normalized)
        root = self.config_manager.get_runtime_root(runtime)
        return Path(InputValidator.safe_join_path(str(root), normalized))

    def scratch_path(self, runtime: str) -> Path:
        return self.config_manager.get_runtime_root(runtime) / SCRATCH_DIR_NAME

    def install(
        self,
        runtime: str,
        version: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> InstalledVersion:
        """
        安装指定版本；已安装时直接返回。

        参数:
            runtime: 运行时名称
            version: 版本号
            progress_callback: 下载进度回调

        返回:
            InstalledVersion

        抛出:
            ResolutionError: 没有匹配的发布包
            DownloadError: 下载返回非成功状态
            FormatError: 压缩包无法解压
            LayoutError: 解压结果缺少预期的顶层目录
            RelocationError: 重命名重试次数用尽
        """
        adapter = self._adapter(runtime)
        final_path = self.install_path(runtime, version)
        normalized = final_path.name

        if final_path.exists():
            logger.info(f"{runtime} {normalized} 已安装: {final_path}")
            return InstalledVersion(runtime, normalized, final_path)

        descriptor = adapter.resolve(normalized)
        logger.info(f"安装 {runtime} {normalized}，下载地址: {descriptor.url}")

        try:
            data = self.http_client.download(descriptor.url, progress_callback)
        except HttpStatusError as e:
            raise DownloadError(
                f"下载失败 (HTTP {e.status_code})，该版本可能不存在于当前平台 "
                f"{adapter.platform_triple()}: {descriptor.url}",
                runtime, normalized,
            ) from e
        except requests.exceptions.RequestException as e:
            raise DownloadError(f"下载失败: {e}", runtime, normalized) from e

        root = self.config_manager.get_runtime_root(runtime)
        scratch = self.scratch_path(runtime)
        self._remove_scratch(scratch)

        try:
            self.extractor.extract(data, descriptor.kind, scratch)

            source = scratch / descriptor.top_level_folder
            if not source.is_dir():
                found = sorted(p.name for p in scratch.iterdir()) if scratch.is_dir() else []
                raise LayoutError(
                    f"解压结果中缺少顶层目录 {descriptor.top_level_folder!r}，实际内容: {found}",
                    runtime, normalized,
                )

            root.mkdir(parents=True, exist_ok=True)
            self._relocate(source, final_path, runtime, normalized)
        finally:
            self._remove_scratch(scratch)

        logger.info(f"成功安装 {runtime} {normalized} 到 {final_path}")
        return InstalledVersion(runtime, normalized, final_path)

    def _relocate(self, source: Path, final_path: Path, runtime: str, version: str) -> None:
        # Windows 上杀毒软件或系统可能短暂占用文件句柄，重命名需要重试
        try:
            self.rename_retry.execute(os.rename, source, final_path)
        except OSError as e:
            raise RelocationError(
                f"无法将 {source} 重命名为 {final_path}，已尝试 "
                f"{self.rename_retry.max_retries + 1} 次: {e}",
                runtime, version,
            ) from e

    def _remove_scratch(self, scratch: Path) -> None:
        if not scratch.exists():
            return
        try:
            shutil.rmtree(scratch)
        except OSError as e:
            logger.warning(f"清理临时目录 {scratch} 失败（忽略）: {e}")
