"""
输入验证模块。

提供运行时名称、版本号、路径和配置的验证功能。
"""

import os
import re
from typing import Any, Dict

from mlvm.utils.logger import get_logger

logger = get_logger()


class InputValidationError(Exception):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    版本号会被用作目录名，因此在拼接任何路径之前必须先经过验证。
    """

    RUNTIME_NAME_PATTERN = re.compile(r'^[a-z0-9_-]+$')
    VERSION_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9._+-]*$')
    MAX_RUNTIME_NAME_LENGTH = 50
    MAX_VERSION_LENGTH = 100
    RESERVED_NAMES = {"current", "temp_unpack", "logs"}

    @classmethod
    def validate_runtime_name(cls, runtime: str) -> bool:
        """
        验证运行时名称的有效性。

        参数:
            runtime: 运行时名称

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not runtime or not runtime.strip():
            raise InputValidationError("运行时名称不能为空")

        runtime = runtime.strip()

        if len(runtime) > cls.MAX_RUNTIME_NAME_LENGTH:
            raise InputValidationError(f"运行时名称不能超过 {cls.MAX_RUNTIME_NAME_LENGTH} 个字符")

        if not cls.RUNTIME_NAME_PATTERN.match(runtime):
            raise InputValidationError("运行时名称只能包含小写字母、数字、下划线和连字符")

        return True

    @classmethod
    def validate_version_string(cls, version: str) -> bool:
        """
        验证版本号字符串的有效性。

        参数:
            version: 版本号字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not version or not version.strip():
            raise InputValidationError("版本号不能为空")

        version = version.strip()

        if len(version) > cls.MAX_VERSION_LENGTH:
            raise InputValidationError(f"版本号不能超过 {cls.MAX_VERSION_LENGTH} 个字符")

        if not cls.VERSION_PATTERN.match(version) or ".." in version:
            raise InputValidationError(f"版本号格式无效: {version}")

        if version in cls.RESERVED_NAMES:
            raise InputValidationError(f"版本号不能使用保留名称: {version}")

        return True

    @classmethod
    def safe_join_path(cls, base_path: str, *paths: str) -> str:
        """
        安全连接路径，防止路径遍历。

        参数:
            base_path: 基础路径
            *paths: 要连接的路径部分

        返回:
            安全连接后的路径

        抛出:
            InputValidationError: 如果结果路径位于 base_path 之外
        """
        base = os.path.abspath(base_path)
        joined = os.path.abspath(os.path.join(base, *paths))
        if joined != base and not joined.startswith(base + os.sep):
            raise InputValidationError(f"路径遍历检测: {joined}")
        return joined

    @classmethod
    def validate_json_config(cls, config_data: Dict[str, Any]) -> bool:
        """
        验证 JSON 配置的有效性。

        参数:
            config_data: 配置数据字典

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not isinstance(config_data, dict):
            raise InputValidationError("配置必须是字典类型")

        settings = config_data.get("settings")
        if settings is None:
            return True
        if not isinstance(settings, dict):
            raise InputValidationError("settings 必须是字典类型")

        mirrors = settings.get("mirrors", {})
        if not isinstance(mirrors, dict):
            raise InputValidationError("mirrors 必须是字典类型")
        for runtime, url in mirrors.items():
            try:
                cls.validate_runtime_name(runtime)
            except InputValidationError as e:
                raise InputValidationError(f"镜像 '{runtime}': {e}") from e
            if not isinstance(url, str) or not url.startswith(("http://", "https://")):
                raise InputValidationError(f"镜像 '{runtime}' 的 URL 无效: {url}")

        return True
