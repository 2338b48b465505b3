"""
`Info.plist` 读写与路径化修改工具。

设计原则：
- 始终按结构解析、修改后整体写回，不做文本拼接。
- 写回时保持文件原有格式（XML 或二进制）与键顺序。
- 仅在设置值时按需创建中间容器（`dict` 或 `list`）。
"""

from __future__ import annotations

import plistlib
from typing import Any

from .pipeline_utils import atomic_write_bytes
from .plist_path import PathElem, parse_key_path

_BINARY_MAGIC = b"bplist00"


def detect_plist_format(data: bytes) -> plistlib.PlistFormat:
    """根据文件头判断 plist 格式。"""
    if data.startswith(_BINARY_MAGIC):
        return plistlib.FMT_BINARY
    return plistlib.FMT_XML


def load_plist_with_format(path: str) -> tuple[Any, plistlib.PlistFormat]:
    """从磁盘读取 plist，返回 `(对象, 原始格式)`。"""
    with open(path, "rb") as f:
        data = f.read()
    return plistlib.loads(data), detect_plist_format(data)


def save_plist(path: str, obj: Any, fmt: plistlib.PlistFormat = plistlib.FMT_XML) -> None:
    """将对象按指定格式写回磁盘（同目录临时文件 + 替换，避免写一半）。"""
    data = plistlib.dumps(obj, fmt=fmt, sort_keys=False)
    atomic_write_bytes(path, data)


def _ensure_list_len(lst: list, idx: int) -> None:
    """确保列表长度至少到 `idx`，不足位置补 `None`。"""
    while len(lst) <= idx:
        lst.append(None)


def _walk_create(root: Any, path: list[PathElem]) -> tuple[Any, PathElem]:
    """按路径遍历到叶子前一层，并在必要时创建中间容器，返回 `(parent, leaf_key)`。"""
    cur = root
    for i, elem in enumerate(path[:-1]):
        nxt = path[i + 1]
        if isinstance(elem, int):
            if not isinstance(cur, list):
                raise TypeError("array index used on non-list container")
            _ensure_list_len(cur, elem)
            if cur[elem] is None:
                cur[elem] = [] if isinstance(nxt, int) else {}
            cur = cur[elem]
        else:
            if not isinstance(cur, dict):
                raise TypeError("dict key used on non-dict container")
            if elem not in cur or cur[elem] is None:
                cur[elem] = [] if isinstance(nxt, int) else {}
            cur = cur[elem]
    return cur, path[-1]


def get_value(root: Any, key_path: str, default: Any = None) -> Any:
    """读取指定 key path 的值；路径不存在时返回 `default`。"""
    cur = root
    for elem in parse_key_path(key_path):
        if isinstance(elem, int):
            if not isinstance(cur, list) or elem >= len(cur):
                return default
        elif not isinstance(cur, dict) or elem not in cur:
            return default
        cur = cur[elem]
    return cur


def set_value(root: Any, key_path: str, value: Any) -> None:
    """在指定 key path 处设置值（必要时自动创建中间结构）。"""
    path = parse_key_path(key_path)
    parent, leaf = _walk_create(root, path)
    if isinstance(leaf, int):
        if not isinstance(parent, list):
            raise TypeError("array index used on non-list container")
        _ensure_list_len(parent, leaf)
        parent[leaf] = value
    else:
        if not isinstance(parent, dict):
            raise TypeError("dict key used on non-dict container")
        parent[leaf] = value

