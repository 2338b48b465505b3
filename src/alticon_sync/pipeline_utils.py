from __future__ import annotations

"""
流程通用工具：原子写文件。
"""

import os
import tempfile


def atomic_write_bytes(path: str, data: bytes) -> None:
    """先写同目录临时文件再 `os.replace`，失败时不会留下被截断的目标文件。"""
    parent = os.path.dirname(os.path.abspath(path))
    name = os.path.basename(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if os.path.exists(path):
            # mkstemp 默认 0600，沿用原文件权限。
            os.chmod(tmp, os.stat(path).st_mode & 0o7777)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
