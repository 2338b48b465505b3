"""
工程备用图标状态只读查看模块。

不修改任何文件，快速对比资源目录、Info.plist 与 pbxproj 三处的备用图标声明。
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ManifestError
from .iconset import PRIMARY_SET_NAME, find_source_filename, read_manifest
from .iconset_scan import ICONSET_SUFFIX, find_icon_sets
from .pbxproj import ALTERNATE_NAMES_KEY, INCLUDE_ALL_KEY, read_managed_settings, read_pbxproj
from .registry import read_alternate_icon_names


@dataclass(frozen=True)
class IconSetInfo:
    """单个图标集的关键信息。"""

    path: str
    name: str
    entry_count: int
    source_filename: str
    error: str


@dataclass(frozen=True)
class ProjectInfo:
    """工程备用图标状态快照。"""

    assets_dir: str
    icon_sets: list[IconSetInfo]
    registry_names: list[str]
    # 每个 buildSettings 块中 `ASSETCATALOG_COMPILER_ALTERNATE_APPICON_NAMES` 的值，
    # 未设置时为 `None`。
    block_names: list[str | None]
    blocks_include_all: list[bool]
    primary_set_name: str = PRIMARY_SET_NAME

    @property
    def alt_set_names(self) -> list[str]:
        return sorted(
            s.name[: -len(ICONSET_SUFFIX)] for s in self.icon_sets if s.name != self.primary_set_name
        )

    @property
    def is_consistent(self) -> bool:
        expected = " ".join(self.registry_names)
        return (
            self.alt_set_names == self.registry_names
            and all(v == expected for v in self.block_names)
            and all(self.blocks_include_all)
        )


def _icon_set_info(set_dir: str) -> IconSetInfo:
    name = os.path.basename(set_dir)
    try:
        manifest = read_manifest(set_dir)
        source = find_source_filename(manifest, set_dir)
    except ManifestError as e:
        return IconSetInfo(path=set_dir, name=name, entry_count=0, source_filename="", error=str(e))
    return IconSetInfo(
        path=set_dir,
        name=name,
        entry_count=len(manifest["images"]),
        source_filename=source,
        error="",
    )


def inspect_project(
    assets_dir: str,
    info_plist: str,
    pbxproj_path: str,
    *,
    primary_set_name: str = PRIMARY_SET_NAME,
) -> ProjectInfo:
    """读取三处声明并返回结构化结果。"""
    sets = [_icon_set_info(d) for d in find_icon_sets(assets_dir)]
    settings = read_managed_settings(read_pbxproj(pbxproj_path))
    return ProjectInfo(
        assets_dir=assets_dir,
        icon_sets=sets,
        registry_names=read_alternate_icon_names(info_plist),
        block_names=[s.get(ALTERNATE_NAMES_KEY) for s in settings],
        blocks_include_all=[s.get(INCLUDE_ALL_KEY) == "YES" for s in settings],
        primary_set_name=primary_set_name,
    )


def print_project_info(info: ProjectInfo) -> None:
    """打印工程备用图标状态。"""
    print("Alternate Icons:")
    print(f"  Assets              : {info.assets_dir}")
    print(f"  Icon Sets           : {len(info.icon_sets)}")
    for s in info.icon_sets:
        detail = f"error: {s.error}" if s.error else f"{s.entry_count} entries | {s.source_filename}"
        print(f"    - {s.name} | {detail}")
    if info.registry_names:
        print(f"  Info.plist          : {', '.join(info.registry_names)}")
    else:
        print("  Info.plist          : -")
    print(f"  Build Blocks        : {len(info.block_names)}")
    for i, value in enumerate(info.block_names, start=1):
        include = "YES" if info.blocks_include_all[i - 1] else "-"
        shown = "-" if value is None else f'"{value}"'
        print(f"    {i}) names={shown} include_all={include}")
    print(f"  Consistent          : {'yes' if info.is_consistent else 'no'}")
