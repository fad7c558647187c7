"""
配置管理器模块。

提供 mlvm 配置的加载、保存和验证功能。
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional

from mlvm.utils.logger import get_logger, get_base_dir
from mlvm.core.interfaces import IConfigManager
from mlvm.utils.input_validator import InputValidator, InputValidationError

logger = get_logger()


class ConfigValidationError(Exception):
    """配置验证错误异常。"""
    pass


class ConfigSaveError(Exception):
    """配置保存错误异常。"""
    pass


DEFAULT_SETTINGS: dict[str, Any] = {
    "request_timeout": 30,
    "download_timeout": 300,
    "download_retry_count": 3,
    "rename_retry_count": 3,
    "rename_retry_delay": 0.5,
    "user_agent": "mlvm-python",
    "mirrors": {
        "node": "https://nodejs.org/dist",
        "python": "https://api.github.com/repos/astral-sh/python-build-standalone",
        "go": "https://go.dev/dl",
        "bun": "https://github.com/oven-sh/bun/releases/download",
    },
}

SETTINGS_FIELDS = {
    "request_timeout": (int, float),
    "download_timeout": (int, float),
    "download_retry_count": int,
    "rename_retry_count": int,
    "rename_retry_delay": (int, float),
    "user_agent": str,
    "mirrors": dict,
}


def _atomic_save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    原子保存 JSON 数据到文件，防止写入中断导致文件损坏。

    参数:
        file_path: 目标文件路径
        data: 要保存的数据
        indent: JSON 缩进
    """
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, file_path)
    except Exception:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


class ConfigManager(IConfigManager):
    """
    配置管理器类。

    配置文件位于基础目录下的 config.json，不存在时以内置默认值创建。
    实现 IConfigManager 抽象接口。
    """

    CONFIG_FILE_NAME = "config.json"

    def __init__(self, base_dir: Optional[Path] = None, config_file: Optional[Path] = None):
        """
        初始化配置管理器。

        参数:
            base_dir: 基础目录，默认为 MLVM_HOME 或 ~/.mlvm
            config_file: 配置文件路径，默认为 <基础目录>/config.json
        """
        self.base_dir = Path(base_dir) if base_dir else get_base_dir()
        self.config_file = Path(config_file) if config_file else self.base_dir / self.CONFIG_FILE_NAME
        self._config: dict[str, Any] = {}
        self.load_config()

    def _get_builtin_default_config(self) -> dict[str, Any]:
        """获取内置默认配置。"""
        return {"settings": copy.deepcopy(DEFAULT_SETTINGS)}

    def load_config(self) -> dict[str, Any]:
        """
        加载配置文件。

        配置文件不存在时只使用内存中的默认配置，首次保存时才写入磁盘；
        文件损坏或验证失败时回退到默认配置。

        返回:
            配置字典
        """
        if not self.config_file.exists():
            logger.debug(f"配置文件不存在，使用默认配置: {self.config_file}")
            self._config = self._get_builtin_default_config()
            return self._config

        try:
            logger.debug(f"从文件加载配置: {self.config_file}")
            with open(self.config_file, "r", encoding="utf-8") as f:
                self._config = json.load(f)
            self._ensure_backward_compatibility()
            self.validate_config(self._config)
            return self._config
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.error(f"加载配置文件失败，使用默认配置: {e}")
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，使用默认配置: {e}")

        self._config = self._get_builtin_default_config()
        return self._config

    def _ensure_backward_compatibility(self) -> None:
        """为旧版本配置补全缺失的字段。"""
        if not isinstance(self._config, dict):
            return
        settings = self._config.setdefault("settings", {})
        if not isinstance(settings, dict):
            return

        for field, default in DEFAULT_SETTINGS.items():
            if field not in settings:
                settings[field] = copy.deepcopy(default)

        mirrors = settings.get("mirrors")
        if isinstance(mirrors, dict):
            for runtime, url in DEFAULT_SETTINGS["mirrors"].items():
                mirrors.setdefault(runtime, url)

    def validate_config(self, config: dict[str, Any]) -> None:
        """
        验证配置结构和字段类型。

        参数:
            config: 配置字典

        抛出:
            ConfigValidationError: 配置无效
        """
        try:
            InputValidator.validate_json_config(config)
        except InputValidationError as e:
            raise ConfigValidationError(str(e)) from e

        settings = config.get("settings", {})
        for field, expected in SETTINGS_FIELDS.items():
            if field not in settings:
                continue
            value = settings[field]
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ConfigValidationError(f"配置项 {field} 类型无效: {value!r}")
            if field.endswith("_count") and value < 0:
                raise ConfigValidationError(f"配置项 {field} 不能为负数: {value}")

    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """
        保存配置到文件。

        参数:
            config: 要保存的配置字典，如果为 None 则保存当前配置
        """
        if config is None:
            config = self._config

        self.validate_config(config)
        self._config = config

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            _atomic_save_json(self.config_file, self._config, indent=2)
            logger.debug(f"配置已保存到 {self.config_file}")
        except (IOError, OSError) as e:
            logger.error(f"保存配置失败: {e}")
            raise ConfigSaveError(f"无法保存配置到 {self.config_file}: {e}") from e

    def set_value(self, dotted_key: str, value: Any) -> None:
        """
        按点分键设置配置值并保存，例如 settings.mirrors.node。

        参数:
            dotted_key: 点分键
            value: 新值
        """
        config = copy.deepcopy(self._config)
        keys = dotted_key.split(".")
        obj = config
        for k in keys[:-1]:
            if not isinstance(obj.get(k), dict):
                obj[k] = {}
            obj = obj[k]
        obj[keys[-1]] = value
        self.save_config(config)

    def get_config(self) -> dict[str, Any]:
        return self._config

    def get_settings(self) -> dict[str, Any]:
        return self._config.get("settings", {})

    def get_setting(self, name: str) -> Any:
        """获取单个设置项，缺失时返回内置默认值。"""
        return self.get_settings().get(name, DEFAULT_SETTINGS.get(name))

    def get_base_dir(self) -> Path:
        return self.base_dir

    def get_runtime_root(self, runtime: str) -> Path:
        """
        获取指定运行时的根目录 <基础目录>/<运行时>。

        参数:
            runtime: 运行时名称

        返回:
            根目录路径
        """
        InputValidator.validate_runtime_name(runtime)
        return self.base_dir / runtime

    def get_mirror(self, runtime: str) -> str:
        """
        获取指定运行时的下载镜像地址（不带末尾斜杠）。

        参数:
            runtime: 运行时名称

        返回:
            镜像地址
        """
        mirrors = self.get_settings().get("mirrors", {})
        url = mirrors.get(runtime) or DEFAULT_SETTINGS["mirrors"].get(runtime, "")
        return url.rstrip("/")
