"""
版本工具模块。

提供版本号解析、匹配和排序等工具函数。
"""

import re
from typing import Any, Dict, List


def parse_version(version_str: str) -> tuple:
    """
    解析版本字符串为可比较的元组。

    参数:
        version_str: 版本字符串（如 v18.17.1、go1.21.0）

    返回:
        版本元组 (major, minor, patch, ...)
    """
    parts = re.findall(r'\d+', version_str)
    return tuple(int(p) for p in parts) if parts else (0,)


def matches_prefix(requested: str, candidate: str) -> bool:
    """
    判断候选版本是否满足请求的版本号。

    "3.11" 匹配 "3.11.9" 但不匹配 "3.110.0"；完整版本号只匹配自身。

    参数:
        requested: 请求的版本号
        candidate: 候选版本号

    返回:
        匹配返回 True
    """
    return candidate == requested or candidate.startswith(requested + ".")


def sort_versions_desc(versions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    按版本号降序排列版本列表。

    参数:
        versions: 版本信息列表

    返回:
        排序后的版本列表
    """
    return sorted(
        versions,
        key=lambda v: parse_version(v.get("version", "0")),
        reverse=True
    )
