"""
`alticon-sync` 的命令行入口模块。

负责收集图标目录、资源目录、Info.plist、.xcodeproj 路径与同步模式，
校验后调用 `alticon_sync.pipeline.sync_alt_icons`。
"""

import argparse
import os
import sys
from collections.abc import Sequence

from .errors import SyncError
from .iconset_scan import ICONSET_SUFFIX
from .inspect import inspect_project, print_project_info
from .pbxproj import locate_pbxproj
from .pipeline import sync_alt_icons
from .types import Mode


def _log_step(message: str) -> None:
    """输出简洁的流程阶段提示。"""
    print(f"[alticon-sync] {message}")


def _choose_candidate(
    *,
    kind: str,
    candidates: list[str],
    required_flag: str,
    context: str,
) -> str:
    """当候选有多个时，交互式让用户选择；非交互环境则报错。"""
    ordered = sorted(os.path.abspath(x) for x in candidates)
    if not sys.stdin.isatty():
        names = ", ".join(os.path.basename(x) for x in ordered)
        raise SystemExit(
            f"Error: multiple {kind} found {context} in non-interactive mode.\n"
            f"Candidates: {names}\n"
            f"Please pass the desired one via {required_flag}.\n"
        )

    print(f"Multiple {kind} found {context}. Please choose one:")
    for i, path in enumerate(ordered, start=1):
        print(f"  {i}) {path}")

    while True:
        raw = input(f"Select {kind} [1-{len(ordered)}]: ").strip()
        if raw.isdigit():
            idx = int(raw)
            if 1 <= idx <= len(ordered):
                selected = ordered[idx - 1]
                print(f"Selected {kind}: {selected}")
                return selected
        print("Invalid selection. Please enter a valid number.")


def _find_xcodeproj_in_cwd() -> str:
    """在当前工作目录自动发现 `.xcodeproj`。"""
    cwd = os.getcwd()
    candidates: list[str] = []
    with os.scandir(cwd) as it:
        for entry in it:
            if entry.is_dir() and entry.name.endswith(".xcodeproj"):
                candidates.append(entry.path)

    if len(candidates) == 1:
        return os.path.abspath(candidates[0])
    if len(candidates) > 1:
        return _choose_candidate(
            kind=".xcodeproj bundles",
            candidates=candidates,
            required_flag="-x/--xcodeproj",
            context="in current directory",
        )
    raise SystemExit(
        "Error: missing -x/--xcodeproj and no .xcodeproj found in current directory.\n"
        "Hint: pass the project path via -x.\n"
    )


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `alticon-sync` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog="alticon-sync",
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Sync iOS alternate app icons across Assets.xcassets, Info.plist and project.pbxproj.\n"
            "Each PNG/JPG in the icons folder becomes <name>.appiconset with every required size,\n"
            "an entry in CFBundleAlternateIcons and a name in "
            "ASSETCATALOG_COMPILER_ALTERNATE_APPICON_NAMES."
        ),
    )

    p.add_argument("-i", "--icons", default="", help="Folder with 1024x1024 source icons (.png/.jpg)")
    p.add_argument("-a", "--assets", default="", help="Asset catalog folder (e.g. Assets.xcassets)")
    p.add_argument("-p", "--info-plist", default="", help="Info.plist path")
    p.add_argument(
        "-x",
        "--xcodeproj",
        default="",
        help="Project .xcodeproj (or its project.pbxproj); auto-detected in current directory",
    )
    p.add_argument(
        "-m",
        "--mode",
        choices=[m.value for m in Mode],
        default=Mode.ADD.value,
        help=(
            "add: keep existing alternate icons and add new ones (default)\n"
            "replace: remove all alternate icons, then recreate from the icons folder\n"
            "remove-all: remove all alternate icons"
        ),
    )
    p.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Number of icon sets resampled in parallel (default: 1)",
    )
    p.add_argument(
        "--primary-set",
        default="AppIcon",
        help="Primary icon set that is never removed (default: AppIcon)",
    )
    p.add_argument(
        "--inspect",
        action="store_true",
        help="Only print the current alternate icon state without modifying anything",
    )
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    return p


def _abs(p: str) -> str:
    """将输入路径展开为绝对路径，统一后续文件校验逻辑。"""
    return os.path.abspath(os.path.expanduser(p))


def _require_dir(value: str, flag: str, what: str) -> str:
    if not value:
        raise SystemExit(f"Error: missing {flag} ({what}).")
    path = _abs(value)
    if not os.path.isdir(path):
        raise SystemExit(f"Error: {what} does not exist or is not a directory: {path}")
    return path


def _require_file(value: str, flag: str, what: str) -> str:
    if not value:
        raise SystemExit(f"Error: missing {flag} ({what}).")
    path = _abs(value)
    if not os.path.isfile(path):
        raise SystemExit(f"Error: {what} does not exist or is a directory: {path}")
    return path


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数、校验输入并调用同步主流程。"""
    parser = build_parser()
    ns = parser.parse_args(argv)
    if ns.jobs < 1:
        raise SystemExit("Error: -j/--jobs must be at least 1.")

    mode = Mode(ns.mode)
    primary = ns.primary_set
    if not primary.endswith(ICONSET_SUFFIX):
        primary += ICONSET_SUFFIX

    _log_step("Resolving project paths")
    assets_dir = _require_dir(ns.assets, "-a/--assets", "asset catalog folder")
    info_plist = _require_file(ns.info_plist, "-p/--info-plist", "Info.plist")
    if ns.xcodeproj:
        xcodeproj = _abs(ns.xcodeproj)
    else:
        xcodeproj = _find_xcodeproj_in_cwd()
        _log_step(f"Auto xcodeproj: {xcodeproj}")
    try:
        pbxproj_path = locate_pbxproj(xcodeproj)
    except SyncError as e:
        raise SystemExit(f"Error: {e}") from e
    _log_step(f"Using pbxproj: {pbxproj_path}")

    if ns.inspect:
        _log_step("Inspecting alternate icon state")
        try:
            info = inspect_project(assets_dir, info_plist, pbxproj_path, primary_set_name=primary)
        except SyncError as e:
            raise SystemExit(f"Error: {e}") from e
        print_project_info(info)
        return 0

    # remove-all 不读取图标目录，其余模式必须提供。
    icons_dir = ""
    if mode is not Mode.REMOVE_ALL:
        icons_dir = _require_dir(ns.icons, "-i/--icons", "icons folder")

    _log_step(f"Starting sync pipeline (mode: {mode.value})")
    try:
        final_names = sync_alt_icons(
            mode=mode,
            icons_dir=icons_dir,
            assets_dir=assets_dir,
            info_plist=info_plist,
            pbxproj_path=pbxproj_path,
            log=_log_step,
            jobs=ns.jobs,
            primary_set_name=primary,
            verbose=bool(ns.verbose),
        )
    except SyncError as e:
        raise SystemExit(f"Error: {e}") from e

    print("Done:")
    print(f"  Mode     : {mode.value}")
    print(f"  Assets   : {assets_dir}")
    print(f"  Plist    : {info_plist}")
    print(f"  Project  : {pbxproj_path}")
    print(f"  AltIcons : {' '.join(final_names) if final_names else '-'}")
    return 0
