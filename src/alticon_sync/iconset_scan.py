"""
在资源目录中发现图标集（`.appiconset`），以及在图标目录中枚举源图片。
"""

from __future__ import annotations

import os

from .errors import FilesystemError

ICONSET_SUFFIX = ".appiconset"
MANIFEST_NAME = "Contents.json"
SOURCE_EXTENSIONS = (".png", ".jpg")


def is_icon_set(path: str) -> bool:
    """目录名以 `.appiconset` 结尾且包含 `Contents.json` 时视为图标集。"""
    return (
        os.path.basename(path).endswith(ICONSET_SUFFIX)
        and os.path.isdir(path)
        and os.path.isfile(os.path.join(path, MANIFEST_NAME))
    )


def _raise(err: OSError) -> None:
    raise err


def find_icon_sets(root: str) -> list[str]:
    """递归收集 `root` 下所有图标集目录（跳过隐藏项，不进入图标集内部）。"""
    out: list[str] = []
    try:
        for current, dirs, _files in os.walk(root, onerror=_raise):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            for d in dirs:
                if is_icon_set(os.path.join(current, d)):
                    out.append(os.path.join(current, d))
            # `.appiconset` 一律视为叶子节点，不再向下查找。
            dirs[:] = [d for d in dirs if not d.endswith(ICONSET_SUFFIX)]
    except OSError as e:
        raise FilesystemError(f"failed to scan icon sets under {root}: {e}") from e
    out.sort()
    return out


def list_source_images(icons_dir: str) -> list[str]:
    """列出图标目录中的 PNG/JPG 文件名（扩展名不区分大小写）。"""
    try:
        names = sorted(os.listdir(icons_dir))
    except OSError as e:
        raise FilesystemError(f"failed to list icons folder {icons_dir}: {e}") from e
    return [
        name
        for name in names
        if name.lower().endswith(SOURCE_EXTENSIONS)
        and os.path.isfile(os.path.join(icons_dir, name))
    ]


def collect_icon_names(icons_dir: str) -> list[str]:
    """返回源图片的文件名主干（保留大小写），排除名为 `AppIcon` 的主图标。"""
    stems = [os.path.splitext(name)[0] for name in list_source_images(icons_dir)]
    return [s for s in stems if s.lower() != "appicon"]
