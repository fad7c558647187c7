"""
运行时适配器注册表。

新增生态只需添加一个适配器并在 ADAPTERS 中登记。
"""

from typing import Dict, Optional, Tuple

from mlvm.core.interfaces import IHttpClient, IRuntimeAdapter
from .bun import BunAdapter
from .go import GoAdapter
from .node import NodeAdapter
from .python import PythonAdapter

ADAPTERS = {
    "node": NodeAdapter,
    "python": PythonAdapter,
    "go": GoAdapter,
    "bun": BunAdapter,
}

RUNTIMES = tuple(ADAPTERS)


def build_adapters(
    http_client: IHttpClient,
    mirrors: Optional[Dict[str, str]] = None,
    host: Optional[Tuple[str, str]] = None,
) -> Dict[str, IRuntimeAdapter]:
    """
    为所有运行时创建适配器实例。

    参数:
        http_client: 版本目录查询使用的 HTTP 客户端
        mirrors: 运行时名称到镜像地址的映射，缺省使用各适配器的默认地址
        host: 覆盖检测到的主机 (os, arch)

    返回:
        运行时名称到适配器实例的映射
    """
    mirrors = mirrors or {}
    adapters: Dict[str, IRuntimeAdapter] = {}
    for name, adapter_cls in ADAPTERS.items():
        kwargs = {"host": host}
        if mirrors.get(name):
            kwargs["mirror"] = mirrors[name]
        adapters[name] = adapter_cls(http_client, **kwargs)
    return adapters


__all__ = [
    "ADAPTERS",
    "RUNTIMES",
    "build_adapters",
    "BunAdapter",
    "GoAdapter",
    "NodeAdapter",
    "PythonAdapter",
]
