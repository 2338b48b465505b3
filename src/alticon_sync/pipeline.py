from __future__ import annotations

"""
Alternate app icon synchronization pipeline.

High-level flow:
1) remove-all / replace: delete every icon set except the primary one.
2) add / replace: create `<stem>.appiconset` for each source image, then resample
   every discovered icon set against the fixed size catalog.
3) Rewrite `CFBundleIcons.CFBundleAlternateIcons` in Info.plist according to the mode.
4) Rewrite the two ASSETCATALOG_COMPILER_* settings in every buildSettings block of
   project.pbxproj with the sorted name list returned by step 3.

Any error aborts the remaining steps. Nothing is rolled back; every step is
idempotent, so the run can simply be repeated after fixing the input.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor

from . import iconset, pbxproj, registry
from .errors import SyncError
from .iconset_scan import collect_icon_names, find_icon_sets
from .types import LogSink, Mode


class LogChannel:
    """只追加的日志通道：后台流程写入，界面线程按序读取。"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: list[str] = []

    def __call__(self, message: str) -> None:
        with self._lock:
            self._messages.append(message)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._messages)

    def read_from(self, index: int) -> tuple[list[str], int]:
        """返回 `index` 之后的新消息以及下一次读取的起点。"""
        with self._lock:
            new = self._messages[index:]
            return new, index + len(new)


def sync_alt_icons(
    *,
    mode: Mode,
    icons_dir: str,
    assets_dir: str,
    info_plist: str,
    pbxproj_path: str,
    log: LogSink,
    jobs: int = 1,
    primary_set_name: str = iconset.PRIMARY_SET_NAME,
    verbose: bool = False,
) -> list[str]:
    """按模式同步图标集、Info.plist 与 pbxproj，返回最终的备用图标名（排序）。"""
    try:
        return _run_stages(
            mode=mode,
            icons_dir=icons_dir,
            assets_dir=assets_dir,
            info_plist=info_plist,
            pbxproj_path=pbxproj_path,
            log=log,
            jobs=jobs,
            primary_set_name=primary_set_name,
            verbose=verbose,
        )
    except SyncError as e:
        log(f"Error [{e.kind}]: {e}")
        raise


def _run_stages(
    *,
    mode: Mode,
    icons_dir: str,
    assets_dir: str,
    info_plist: str,
    pbxproj_path: str,
    log: LogSink,
    jobs: int,
    primary_set_name: str,
    verbose: bool,
) -> list[str]:
    if mode is not Mode.ADD:
        iconset.cleanup(assets_dir, primary_set_name=primary_set_name, log=log)

    names: list[str] = []
    if mode is not Mode.REMOVE_ALL:
        iconset.materialize(mode, icons_dir, assets_dir, log=log)
        sets = find_icon_sets(assets_dir)
        log(f"Resampling {len(sets)} icon set(s)")
        iconset.resync_all(sets, jobs=jobs, log=log, verbose=verbose)
        names = collect_icon_names(icons_dir)

    final_names = registry.edit_registry(mode, names, info_plist, log=log)
    pbxproj.patch(final_names, pbxproj_path, log=log)
    log("Process completed")
    return final_names


def run_in_background(**kwargs) -> Future[list[str]]:
    """在单个后台线程中运行 `sync_alt_icons`，结果或异常通过 Future 取回。"""
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="alticon-sync")
    try:
        return executor.submit(sync_alt_icons, **kwargs)
    finally:
        # 不等待：线程在任务完成后自行退出。
        executor.shutdown(wait=False)
