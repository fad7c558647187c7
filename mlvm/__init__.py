"""
mlvm - 多语言运行时版本管理器。

为 Node.js、Python、Go 和 Bun 下载、安装并切换版本。
"""

__version__ = "0.1.0"
