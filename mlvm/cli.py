"""
mlvm 命令行接口模块。
"""

import argparse
import json
import logging
from typing import Optional

from mlvm import __version__
from mlvm.core.config_manager import ConfigManager, ConfigSaveError, ConfigValidationError
from mlvm.core.env_manager import EnvManager
from mlvm.core.errors import MlvmError
from mlvm.core.runtimes import RUNTIMES
from mlvm.core.version_manager import VersionManager
from mlvm.utils.input_validator import InputValidationError
from mlvm.utils.logger import get_logger, set_log_level

logger = get_logger()

RUNTIME_LABELS = {
    "node": "Node.js",
    "python": "Python",
    "go": "Go",
    "bun": "Bun",
}

REMOTE_LIST_LIMIT = 30


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="mlvm",
        description="mlvm - 多语言运行时版本管理器",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  mlvm node list-remote        列出可用的 Node.js 版本
  mlvm node install 18.17.1    安装 Node.js v18.17.1
  mlvm node use 18.17.1        切换到 Node.js v18.17.1
  mlvm python install 3.11     安装 Python 3.11 的最新补丁版本
  mlvm go list                 列出已安装的 Go 版本
  mlvm config --set settings.mirrors.node=https://npmmirror.com/mirrors/node
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="启用详细输出",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="命令",
        description="可用的 CLI 命令",
    )

    for runtime in RUNTIMES:
        label = RUNTIME_LABELS.get(runtime, runtime)
        runtime_parser = subparsers.add_parser(runtime, help=f"管理 {label} 版本")
        actions = runtime_parser.add_subparsers(dest="action", title="操作")

        actions.add_parser("list-remote", help=f"列出远程可用的 {label} 版本")
        actions.add_parser("list", help=f"列出已安装的 {label} 版本")
        actions.add_parser("current", help=f"显示当前使用的 {label} 版本")

        install_parser = actions.add_parser("install", help=f"下载并安装指定 {label} 版本")
        install_parser.add_argument("version", help="要安装的版本")

        use_parser = actions.add_parser("use", help=f"切换到指定 {label} 版本")
        use_parser.add_argument("version", help="要切换到的版本")

    config_parser = subparsers.add_parser(
        "config",
        help="显示或编辑配置",
    )
    config_parser.add_argument(
        "--set",
        "-s",
        type=str,
        help="设置配置值（格式：key=value，key 使用点分路径）",
    )

    return parser


def run_cli(args: argparse.Namespace, version_manager: Optional[VersionManager] = None) -> int:
    """
    运行命令行接口。

    参数:
        args: 解析后的命令行参数
        version_manager: 可选的版本管理器实例（测试时注入）

    返回:
        退出码（0 表示成功）
    """
    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command is None:
        print("未指定命令。使用 --help 查看帮助信息。")
        return 1

    if args.command == "config":
        return handle_config(args)

    if getattr(args, "action", None) is None:
        print(f"未指定操作。使用 mlvm {args.command} --help 查看帮助信息。")
        return 1

    command_handlers = {
        "list-remote": handle_list_remote,
        "list": handle_list,
        "current": handle_current,
        "install": handle_install,
        "use": handle_use,
    }

    handler = command_handlers.get(args.action)
    if handler is None:
        print(f"未知操作: {args.action}")
        return 1

    try:
        if version_manager is None:
            version_manager = VersionManager(ConfigManager())
        return handler(args, version_manager)
    except (MlvmError, InputValidationError) as e:
        logger.error(str(e))
        print(f"错误: {e}")
        return 1
    except OSError as e:
        logger.exception(f"文件系统错误: {e}")
        print(f"文件系统错误: {e}")
        return 1
    except Exception as e:
        logger.exception(f"执行 {args.command} {args.action} 时发生未预期的错误: {e}")
        print(f"未预期的错误: {e}")
        return 2


def _label(runtime: str) -> str:
    return RUNTIME_LABELS.get(runtime, runtime)


def handle_list_remote(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 list-remote 命令：列出远程可用版本。

    参数:
        args: 解析后的命令行参数
        version_manager: 版本管理器实例

    返回:
        退出码
    """
    runtime = args.command
    print(f"正在获取 {_label(runtime)} 的远程版本...")
    versions = version_manager.list_remote(runtime)
    if not versions:
        print(f"未找到 {_label(runtime)} 的远程版本")
        return 0

    print(f"{_label(runtime)} 可用版本:")
    for v in versions[:REMOTE_LIST_LIMIT]:
        suffix = f" (LTS: {v['lts']})" if v.get("lts") else ""
        print(f"  - {v['version']}{suffix}")
    if len(versions) > REMOTE_LIST_LIMIT:
        print(f"  ... 还有 {len(versions) - REMOTE_LIST_LIMIT} 个版本")
    return 0


def handle_list(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 list 命令：列出已安装版本，当前版本以 * 标记。

    参数:
        args: 解析后的命令行参数
        version_manager: 版本管理器实例

    返回:
        退出码
    """
    runtime = args.command
    versions = version_manager.list_local(runtime)
    if not versions:
        print(f"尚未安装任何 {_label(runtime)} 版本")
        return 0

    print(f"{_label(runtime)} 已安装版本:")
    for v in versions:
        marker = " *" if v["current"] else "  "
        print(f"{marker} {v['version']}")
        if args.verbose:
            print(f"     路径: {v['path']}")
    return 0


def handle_current(args: argparse.Namespace, version_manager: VersionManager) -> int:
    runtime = args.command
    current = version_manager.get_current_version(runtime)
    print(f"{_label(runtime)} 当前版本: {current or '未设置'}")
    return 0


def handle_install(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 install 命令：下载并安装指定版本。

    参数:
        args: 解析后的命令行参数
        version_manager: 版本管理器实例

    返回:
        退出码
    """
    runtime = args.command
    version = args.version

    if version_manager.is_installed(runtime, version):
        print(f"{_label(runtime)} {version} 已安装。")
        return 0

    print(f"正在安装 {_label(runtime)} {version}...")

    def progress(downloaded: int, total: int):
        if total <= 0:
            print(f"\r已下载 {downloaded} 字节", end="", flush=True)
            return
        percent = int(downloaded / total * 100)
        bar_len = 40
        filled = int(bar_len * percent / 100)
        bar = "=" * filled + "-" * (bar_len - filled)
        print(f"\r[{bar}] {percent}% ({downloaded}/{total} 字节)", end="", flush=True)

    installed = version_manager.install(runtime, version, progress)
    print(f"\n成功安装 {_label(runtime)} {installed.version} 到 {installed.path}")
    return 0


def handle_use(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 use 命令：切换到指定版本并输出需要加入 PATH 的目录。

    参数:
        args: 解析后的命令行参数
        version_manager: 版本管理器实例

    返回:
        退出码
    """
    runtime = args.command
    info = version_manager.use(runtime, args.version)
    print(f"成功切换 {_label(runtime)} 到 {info.version}")
    for line in EnvManager().path_instructions(info.bin_path):
        print(line)
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """
    处理 config 命令：显示或编辑配置。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码
    """
    config_manager = ConfigManager()

    if args.set:
        key, _, value = args.set.partition("=")
        if not key or not value:
            print("格式无效。请使用: key=value")
            return 1

        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            pass

        try:
            config_manager.set_value(key, value)
        except (ConfigValidationError, ConfigSaveError) as e:
            print(f"设置失败: {e}")
            return 1
        print(f"已设置 {key} = {value}")
    else:
        print(json.dumps(config_manager.get_config(), indent=2, ensure_ascii=False))

    return 0
