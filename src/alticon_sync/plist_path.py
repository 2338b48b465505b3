from __future__ import annotations

PathElem = str | int


def parse_key_path(key_path: str) -> list[PathElem]:
    """
    将 PlistBuddy 风格路径解析为字典键/数组索引序列。

    语法说明：
    - `CFBundleIcons:CFBundlePrimaryIcon` 表示字典键逐层向下。
    - `CFBundleIcons:CFBundlePrimaryIcon:CFBundleIconFiles:0` 支持数组索引。
    - 允许以前导 `:` 开头，兼容 PlistBuddy 习惯。
    """
    s = key_path.strip()
    if s.startswith(":"):
        s = s[1:]
    if not s:
        raise ValueError("empty key path")
    out: list[PathElem] = []
    for p in s.split(":"):
        if p == "":
            raise ValueError(f"invalid key path: {key_path}")
        out.append(int(p) if p.isdigit() else p)
    return out


def join_key_path(*parts: str) -> str:
    """拼接字典键为 key path；键本身不能包含 `:` 或是纯数字。"""
    for p in parts:
        if not p or ":" in p or p.isdigit():
            raise ValueError(f"invalid key path element: {p!r}")
    return ":".join(parts)
