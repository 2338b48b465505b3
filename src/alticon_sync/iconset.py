"""
图标集目录的生成、清理与重新同步。

High-level flow (per icon set):
1) `materialize` creates `<stem>.appiconset`, copies the source image in and writes a
   provisional single-entry `Contents.json`.
2) `resync` reads the manifest, finds the 1024x1024 source entry, resamples every
   catalog size, rewrites `Contents.json` from scratch and prunes stale files.
"""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from . import resample
from .catalog import ICON_SPECS, SOURCE_SIZE, source_spec
from .errors import (
    FilesystemError,
    ManifestError,
    MissingSourceEntry,
    NoSourceImages,
    SourceFileMissing,
)
from .iconset_scan import ICONSET_SUFFIX, MANIFEST_NAME, find_icon_sets, list_source_images
from .types import IconSpec, LogSink, Mode, ResizedImage

MANIFEST_INFO = {"author": "xcode", "version": 1}
PRIMARY_SET_NAME = "AppIcon" + ICONSET_SUFFIX


def _noop(_msg: str) -> None:
    pass


def manifest_document(images: Iterable[ResizedImage]) -> dict[str, Any]:
    return {"images": [img.manifest_entry() for img in images], "info": dict(MANIFEST_INFO)}


def write_manifest(set_dir: str, images: Iterable[ResizedImage]) -> None:
    """整体写入 `Contents.json`（键排序 + 固定缩进，保证输出稳定）。"""
    data = json.dumps(manifest_document(images), indent=2, sort_keys=True) + "\n"
    path = os.path.join(set_dir, MANIFEST_NAME)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(data)
    except OSError as e:
        raise FilesystemError(f"failed to write {path}: {e}") from e


def read_manifest(set_dir: str) -> dict[str, Any]:
    path = os.path.join(set_dir, MANIFEST_NAME)
    try:
        with open(path, "rb") as f:
            obj = json.load(f)
    except (OSError, ValueError) as e:
        raise ManifestError(f"cannot read {path}: {e}") from e
    if not isinstance(obj, dict) or not isinstance(obj.get("images"), list):
        raise ManifestError(f"invalid manifest (missing images array): {path}")
    return obj


def find_source_filename(manifest: dict[str, Any], set_dir: str) -> str:
    """返回第一条不带 `scale` 的 1024x1024 条目引用的文件名。"""
    for entry in manifest["images"]:
        if isinstance(entry, dict) and entry.get("size") == SOURCE_SIZE and "scale" not in entry:
            filename = entry.get("filename")
            if isinstance(filename, str) and filename:
                return filename
            break
    raise MissingSourceEntry(
        f"no {SOURCE_SIZE} entry with a filename in {os.path.basename(set_dir)}/{MANIFEST_NAME}"
    )


def _remove_tree(path: str) -> None:
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"failed to remove {path}: {e}") from e


def cleanup(
    assets_dir: str,
    *,
    primary_set_name: str = PRIMARY_SET_NAME,
    log: LogSink = _noop,
) -> int:
    """删除资源目录中除主图标集以外的所有图标集，返回删除数量。"""
    removed = 0
    for set_dir in find_icon_sets(assets_dir):
        name = os.path.basename(set_dir)
        if name == primary_set_name:
            continue
        _remove_tree(set_dir)
        removed += 1
        log(f"Removed alt icon set: {name}")
    log(f"Cleanup done. Removed {removed} alt icon set(s)")
    return removed


def _create_icon_set(source: str, set_dir: str, *, log: LogSink) -> None:
    filename = os.path.basename(source)
    dest = os.path.join(set_dir, filename)
    try:
        os.makedirs(set_dir, exist_ok=True)
        if os.path.lexists(dest):
            os.remove(dest)
        shutil.copyfile(source, dest)
    except OSError as e:
        raise FilesystemError(f"failed to copy {source} into {set_dir}: {e}") from e
    log(f"Copied file: {filename}")

    # 临时清单，只引用源图；随后 `resync` 会整体重写。
    write_manifest(set_dir, [ResizedImage.from_spec(source_spec(), filename)])
    log(f"Created {MANIFEST_NAME} for {os.path.basename(set_dir)}")


def materialize(
    mode: Mode,
    icons_dir: str,
    assets_dir: str,
    *,
    log: LogSink = _noop,
) -> list[str]:
    """为图标目录中的每张源图片建立图标集，返回本次新建的目录列表。"""
    if mode is Mode.REMOVE_ALL:
        raise ValueError("materialize does not support remove-all mode")

    files = list_source_images(icons_dir)
    if not files:
        log("No PNG or JPG files found in the icons folder")
        raise NoSourceImages(f"no PNG or JPG files found in {icons_dir}")

    created: list[str] = []
    for file in files:
        stem = os.path.splitext(file)[0]
        set_name = stem + ICONSET_SUFFIX
        set_dir = os.path.join(assets_dir, set_name)

        if os.path.exists(set_dir):
            if mode is Mode.ADD:
                log(f"Icon set exists, skip copying: {set_name}")
                continue
            _remove_tree(set_dir)
            log(f"Removed existing icon set: {set_name}")

        _create_icon_set(os.path.join(icons_dir, file), set_dir, log=log)
        created.append(set_dir)
    return created


def _write_bytes(path: str, data: bytes) -> None:
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise FilesystemError(f"failed to write {path}: {e}") from e


def prune_unreferenced(set_dir: str, images: Iterable[ResizedImage]) -> list[str]:
    """删除图标集中未被清单引用的文件（子目录保持不动），返回删除的文件名。"""
    used = {img.filename for img in images}
    used.add(MANIFEST_NAME)
    removed: list[str] = []
    try:
        for name in sorted(os.listdir(set_dir)):
            path = os.path.join(set_dir, name)
            if name in used or not os.path.isfile(path):
                continue
            os.remove(path)
            removed.append(name)
    except OSError as e:
        raise FilesystemError(f"failed to prune {set_dir}: {e}") from e
    return removed


def resync(
    set_dir: str,
    *,
    specs: tuple[IconSpec, ...] = ICON_SPECS,
    log: LogSink = _noop,
    verbose: bool = False,
) -> list[ResizedImage]:
    """按尺寸表重新生成单个图标集的全部图片与 `Contents.json`。"""
    manifest = read_manifest(set_dir)
    source_name = find_source_filename(manifest, set_dir)
    source_path = os.path.join(set_dir, source_name)
    if not os.path.isfile(source_path):
        raise SourceFileMissing(
            f"source file {source_name} referenced by {MANIFEST_NAME} "
            f"is missing in {os.path.basename(set_dir)}"
        )

    image = resample.load_source(source_path)
    images: list[ResizedImage] = []
    for spec in specs:
        if spec.is_source:
            images.append(ResizedImage.from_spec(spec, source_name))
            continue
        data, width, height = resample.resize(image, spec)
        filename = resample.output_filename(spec)
        _write_bytes(os.path.join(set_dir, filename), data)
        if verbose:
            log(f"  wrote {filename} ({width}x{height})")
        images.append(ResizedImage.from_spec(spec, filename))

    write_manifest(set_dir, images)
    prune_unreferenced(set_dir, images)
    log(f"Updated .appiconset => {os.path.basename(set_dir)}")
    return images


def resync_all(
    set_dirs: list[str],
    *,
    jobs: int = 1,
    specs: tuple[IconSpec, ...] = ICON_SPECS,
    log: LogSink = _noop,
    verbose: bool = False,
) -> dict[str, list[ResizedImage]]:
    """对多个图标集执行 `resync`；各图标集互不共享状态，可并行。"""
    if jobs <= 1 or len(set_dirs) <= 1:
        return {
            d: resync(d, specs=specs, log=log, verbose=verbose) for d in set_dirs
        }

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        results = pool.map(
            lambda d: resync(d, specs=specs, log=log, verbose=verbose), set_dirs
        )
        return dict(zip(set_dirs, results))
