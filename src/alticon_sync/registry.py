"""
`Info.plist` 中备用图标注册表（`CFBundleIcons.CFBundleAlternateIcons`）的合并/替换/清空。
"""

from __future__ import annotations

import plistlib
from collections.abc import Sequence
from typing import Any
from xml.parsers.expat import ExpatError

from .errors import MetadataParseError, MetadataWriteError
from .plist_edit import get_value, load_plist_with_format, save_plist, set_value
from .plist_path import join_key_path
from .types import LogSink, Mode

ICONS_KEY = "CFBundleIcons"
PRIMARY_ICON_FILES_KEY = join_key_path(ICONS_KEY, "CFBundlePrimaryIcon", "CFBundleIconFiles")
PRIMARY_PRERENDERED_KEY = join_key_path(ICONS_KEY, "CFBundlePrimaryIcon", "UIPrerenderedIcon")
ALTERNATE_KEY = join_key_path(ICONS_KEY, "CFBundleAlternateIcons")
PRIMARY_ICON_NAME = "AppIcon"


def _noop(_msg: str) -> None:
    pass


def alternate_icon_entry(name: str) -> dict[str, Any]:
    return {"CFBundleIconFiles": [name], "UIPrerenderedIcon": False}


def _load_root(info_plist_path: str) -> tuple[dict, plistlib.PlistFormat]:
    try:
        root, fmt = load_plist_with_format(info_plist_path)
    except (OSError, plistlib.InvalidFileException, ValueError, ExpatError) as e:
        raise MetadataParseError(f"failed to parse {info_plist_path}: {e}") from e
    if not isinstance(root, dict):
        raise MetadataParseError(f"{info_plist_path}: top-level object is not a dict")
    return root, fmt


def _alternate_icons(root: dict, info_plist_path: str) -> dict[str, Any]:
    alt = get_value(root, ALTERNATE_KEY)
    if alt is None:
        return {}
    if not isinstance(alt, dict):
        raise MetadataParseError(f"{info_plist_path}: {ALTERNATE_KEY} is not a dict")
    return alt


def ensure_primary_icon(root: dict) -> None:
    """确保主图标记录存在且字段固定；主图标字典中的其他键保留。"""
    set_value(root, PRIMARY_ICON_FILES_KEY, [PRIMARY_ICON_NAME])
    set_value(root, PRIMARY_PRERENDERED_KEY, False)


def apply_mode(
    alt: dict[str, Any],
    mode: Mode,
    new_names: Sequence[str],
    *,
    log: LogSink = _noop,
) -> dict[str, Any]:
    """按模式返回新的注册表字典；`add` 模式下已有条目原样保留。"""
    if mode is Mode.REPLACE:
        out = {name: alternate_icon_entry(name) for name in new_names}
        log(f"Info.plist: replaced alternate icons with {len(out)} item(s)")
        return out

    if mode is Mode.ADD:
        out = dict(alt)
        added = 0
        for name in new_names:
            if name in out:
                log(f'Alternate icon "{name}" already exists, skipped')
                continue
            out[name] = alternate_icon_entry(name)
            added += 1
        log(f"Info.plist: added {added} new alternate icon(s)")
        return out

    log("Info.plist: removed all alternate icons")
    return {}


def edit_registry(
    mode: Mode,
    new_names: Sequence[str],
    info_plist_path: str,
    *,
    log: LogSink = _noop,
) -> list[str]:
    """读取、修改并写回 `Info.plist`，返回排序后的最终备用图标名列表。"""
    root, fmt = _load_root(info_plist_path)
    try:
        ensure_primary_icon(root)
    except TypeError as e:
        raise MetadataParseError(f"{info_plist_path}: unexpected {ICONS_KEY} layout: {e}") from e

    alt = apply_mode(_alternate_icons(root, info_plist_path), mode, new_names, log=log)
    set_value(root, ALTERNATE_KEY, alt)

    try:
        save_plist(info_plist_path, root, fmt)
    except (OSError, TypeError, OverflowError) as e:
        raise MetadataWriteError(f"failed to write {info_plist_path}: {e}") from e
    log(f"Updated Info.plist with {ICONS_KEY}")
    return sorted(alt)


def read_alternate_icon_names(info_plist_path: str) -> list[str]:
    """只读地返回当前注册的备用图标名（排序）。"""
    root, _fmt = _load_root(info_plist_path)
    return sorted(_alternate_icons(root, info_plist_path))
