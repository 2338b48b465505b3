"""
`project.pbxproj` 中 `buildSettings` 块的定点改写。

pbxproj 没有公开语法，这里不做完整解析：按行扫描，用花括号配平找到每个
`buildSettings = { ... };` 块，只替换两个受管键，其余字节原样保留（含 CRLF）。

新插入的两行沿用块内已有设置行的缩进，而不是 `buildSettings = {` 所在行的缩进；
空块才以起始行缩进再加一级。受管键无论写成单行、带行尾注释还是 `( ... );` 列表，
都会整体移除后重写。
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence

from .errors import BuildFileReadError, BuildFileWriteError, InputValidationError
from .pipeline_utils import atomic_write_bytes
from .types import LogSink

PBXPROJ_NAME = "project.pbxproj"
INCLUDE_ALL_KEY = "ASSETCATALOG_COMPILER_INCLUDE_ALL_APPICON_ASSETS"
ALTERNATE_NAMES_KEY = "ASSETCATALOG_COMPILER_ALTERNATE_APPICON_NAMES"
MANAGED_KEYS = (INCLUDE_ALL_KEY, ALTERNATE_NAMES_KEY)

_BLOCK_START_RE = re.compile(r"\bbuildSettings\s*=\s*\{")
_QUOTED_RE = re.compile(r'"(?:[^"\\]|\\.)*"')
_COMMENT_RE = re.compile(r"/\*.*?\*/")
_SETTING_RE = re.compile(r'^\s*"?([A-Za-z0-9_.\[\]=*,\- ]+?)"?\s*=\s*(.*?)\s*;\s*$')
_LIST_OPEN_RE = re.compile(r'^\s*"?([A-Za-z0-9_.\[\]=*,\- ]+?)"?\s*=\s*\(\s*$')
_LIST_CLOSE_RE = re.compile(r"^\s*\)\s*;\s*$")
_INDENT_RE = re.compile(r"^[ \t]*")


def _noop(_msg: str) -> None:
    pass


def locate_pbxproj(path: str) -> str:
    """接受 `.xcodeproj` 目录或 `project.pbxproj` 文件，返回 pbxproj 路径。"""
    if os.path.isdir(path):
        if not path.rstrip(os.sep).endswith(".xcodeproj"):
            raise InputValidationError(f".xcodeproj path is invalid: {path}")
        candidate = os.path.join(path, PBXPROJ_NAME)
        if not os.path.isfile(candidate):
            raise InputValidationError(f"Could not find {PBXPROJ_NAME} inside {path}")
        return candidate
    if os.path.isfile(path) and os.path.basename(path) == PBXPROJ_NAME:
        return path
    raise InputValidationError(f"not a .xcodeproj directory or {PBXPROJ_NAME}: {path}")


def _split_lines(text: str) -> list[str]:
    """按 `\\n` 切分并保留行尾，`"".join(...)` 可还原原文。"""
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _eol(line: str) -> str:
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith("\n"):
        return "\n"
    return ""


def _brace_delta(line: str) -> int:
    s = _COMMENT_RE.sub("", _QUOTED_RE.sub('""', line))
    return s.count("{") - s.count("}")


def find_build_settings_blocks(lines: Sequence[str]) -> list[tuple[int, int]]:
    """返回每个块的 `(起始行号, 结束行号)`，行号从 0 开始。"""
    blocks: list[tuple[int, int]] = []
    i = 0
    n = len(lines)
    while i < n:
        if not _BLOCK_START_RE.search(_QUOTED_RE.sub('""', lines[i])):
            i += 1
            continue
        depth = _brace_delta(lines[i])
        if depth <= 0:
            # 单行块（`buildSettings = { };`），Xcode 不会这样写，保持原样。
            i += 1
            continue
        j = i + 1
        while j < n:
            depth += _brace_delta(lines[j])
            if depth <= 0:
                break
            j += 1
        if j >= n:
            raise BuildFileReadError(f"unterminated buildSettings block at line {i + 1}")
        blocks.append((i, j))
        i = j + 1
    return blocks


def _strip_comments(line: str) -> str:
    return _COMMENT_RE.sub("", line.rstrip("\r\n"))


def _settings(body: Sequence[str]) -> list[tuple[str, str, int, int]]:
    """
    扫描块内的设置，返回 `(键, 值, 首行, 末行)`。

    单行写法 `KEY = value;` 的首末行相同；列表写法 `KEY = (` ... `);` 跨多行，
    值为各元素以空格拼接。行尾 `/* ... */` 注释在匹配前去掉。
    """
    out: list[tuple[str, str, int, int]] = []
    i = 0
    while i < len(body):
        line = _strip_comments(body[i])
        m = _SETTING_RE.match(line)
        if m:
            out.append((m.group(1), unquote_value(m.group(2)), i, i))
            i += 1
            continue
        m = _LIST_OPEN_RE.match(line)
        if m:
            items: list[str] = []
            j = i + 1
            while j < len(body) and not _LIST_CLOSE_RE.match(_strip_comments(body[j])):
                item = _strip_comments(body[j]).strip().rstrip(",").strip()
                if item:
                    items.append(unquote_value(item))
                j += 1
            if j < len(body):
                out.append((m.group(1), " ".join(items), i, j))
                i = j + 1
                continue
        i += 1
    return out


def _managed_line_numbers(body: Sequence[str]) -> set[int]:
    drop: set[int] = set()
    for key, _value, first, last in _settings(body):
        if key in MANAGED_KEYS:
            drop.update(range(first, last + 1))
    return drop


def _setting_indent(start_line: str, body: Sequence[str]) -> str:
    """块内已有设置行的缩进；空块时为起始行缩进再加一级。"""
    for line in body:
        if line.strip():
            return _INDENT_RE.match(line).group(0)
    start_indent = _INDENT_RE.match(start_line).group(0)
    unit = "    " if start_indent and "\t" not in start_indent else "\t"
    return start_indent + unit


def quote_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def unquote_value(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def patch_text(text: str, names: Sequence[str]) -> tuple[str, int]:
    """改写文本中所有 `buildSettings` 块，返回 `(新文本, 块数量)`。"""
    lines = _split_lines(text)
    blocks = find_build_settings_blocks(lines)
    joined = " ".join(names)

    out: list[str] = []
    prev = 0
    for start, end in blocks:
        out.extend(lines[prev:start + 1])
        body = lines[start + 1:end]
        indent = _setting_indent(lines[start], body)
        eol = _eol(lines[start])

        drop = _managed_line_numbers(body)
        out.extend(line for k, line in enumerate(body) if k not in drop)
        out.append(f"{indent}{INCLUDE_ALL_KEY} = YES;{eol}")
        out.append(f"{indent}{ALTERNATE_NAMES_KEY} = {quote_value(joined)};{eol}")
        out.append(lines[end])
        prev = end + 1
    out.extend(lines[prev:])
    return "".join(out), len(blocks)


def read_managed_settings(text: str) -> list[dict[str, str]]:
    """按块返回两个受管键的当前值（未设置的键不出现在字典中）。"""
    lines = _split_lines(text)
    out: list[dict[str, str]] = []
    for start, end in find_build_settings_blocks(lines):
        values: dict[str, str] = {}
        for key, value, _first, _last in _settings(lines[start + 1:end]):
            if key in MANAGED_KEYS:
                values[key] = value
        out.append(values)
    return out


def read_pbxproj(pbxproj_path: str) -> str:
    try:
        with open(pbxproj_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise BuildFileReadError(f"failed to read {pbxproj_path}: {e}") from e
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BuildFileReadError(f"{pbxproj_path} is not valid UTF-8: {e}") from e


def patch(names: Sequence[str], pbxproj_path: str, *, log: LogSink = _noop) -> int:
    """改写 pbxproj 中全部构建配置的受管键，返回处理的块数量。"""
    text = read_pbxproj(pbxproj_path)
    new_text, count = patch_text(text, names)
    try:
        atomic_write_bytes(pbxproj_path, new_text.encode("utf-8"))
    except OSError as e:
        raise BuildFileWriteError(f"failed to write {pbxproj_path}: {e}") from e
    log(f"Updated .pbxproj for ALL configurations ({count} buildSettings block(s))")
    return count
