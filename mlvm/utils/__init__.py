"""
mlvm 工具模块。

提供日志记录、重试、输入验证和权限检测等工具功能。
"""

from .logger import get_logger, get_base_dir
from .permission_manager import is_admin, is_developer_mode_enabled
from .retry import RetryHandler
from .input_validator import InputValidator, InputValidationError

__all__ = [
    "get_logger",
    "get_base_dir",
    "is_admin",
    "is_developer_mode_enabled",
    "RetryHandler",
    "InputValidator",
    "InputValidationError",
]
