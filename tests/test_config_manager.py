"""Tests for the config manager."""

import json

import pytest

from mlvm.core.config_manager import (
    ConfigManager,
    ConfigValidationError,
    DEFAULT_SETTINGS,
)


class TestConfigLoading:
    """配置加载与默认值。"""

    def test_defaults_without_file(self, config_manager, base_dir):
        assert config_manager.get_settings() == DEFAULT_SETTINGS
        assert not (base_dir / "config.json").exists()

    def test_runtime_root(self, config_manager, base_dir):
        assert config_manager.get_runtime_root("node") == base_dir / "node"

    def test_mirror_strips_trailing_slash(self, config_manager):
        config_manager.set_value("settings.mirrors.node", "https://npmmirror.com/mirrors/node/")
        assert config_manager.get_mirror("node") == "https://npmmirror.com/mirrors/node"

    def test_corrupt_file_falls_back(self, base_dir):
        base_dir.mkdir(parents=True)
        (base_dir / "config.json").write_text("{ not json", encoding="utf-8")

        manager = ConfigManager(base_dir=base_dir)

        assert manager.get_setting("request_timeout") == 30

    def test_old_config_gets_missing_fields(self, base_dir):
        base_dir.mkdir(parents=True)
        (base_dir / "config.json").write_text(
            json.dumps({"settings": {"request_timeout": 10, "mirrors": {"go": "https://golang.google.cn/dl"}}}),
            encoding="utf-8",
        )

        manager = ConfigManager(base_dir=base_dir)

        assert manager.get_setting("request_timeout") == 10
        assert manager.get_setting("rename_retry_count") == 3
        assert manager.get_mirror("go") == "https://golang.google.cn/dl"
        assert manager.get_mirror("node") == "https://nodejs.org/dist"

    def test_invalid_values_fall_back(self, base_dir):
        base_dir.mkdir(parents=True)
        (base_dir / "config.json").write_text(
            json.dumps({"settings": {"download_retry_count": -1}}), encoding="utf-8"
        )

        manager = ConfigManager(base_dir=base_dir)

        assert manager.get_setting("download_retry_count") == 3


class TestConfigSaving:
    """配置保存。"""

    def test_set_value_persists(self, config_manager, base_dir):
        config_manager.set_value("settings.download_timeout", 600)

        reloaded = ConfigManager(base_dir=base_dir)
        assert reloaded.get_setting("download_timeout") == 600
        assert not (base_dir / "config.json.tmp").exists()

    @pytest.mark.parametrize("key,value", [
        ("settings.mirrors.node", "ftp://example.com"),
        ("settings.rename_retry_count", True),
        ("settings.rename_retry_count", -2),
        ("settings.user_agent", 42),
        ("settings.mirrors", "https://example.com"),
    ])
    def test_invalid_value_rejected(self, config_manager, base_dir, key, value):
        with pytest.raises(ConfigValidationError):
            config_manager.set_value(key, value)

        assert not (base_dir / "config.json").exists()
        assert config_manager.get_settings() == DEFAULT_SETTINGS
