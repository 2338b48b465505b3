"""
基于 Pillow 的图标缩放。

本模块只负责“解码源图 -> 按规格缩放 -> 编码为 PNG 字节”，不写任何文件；
写盘由 `iconset` 模块负责。
"""

from __future__ import annotations

import math
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError, ResampleError
from .types import IconSpec


def parse_size(size: str) -> tuple[float, float]:
    """解析 `WxH` 形式的逻辑尺寸，支持小数（如 `83.5x83.5`）。"""
    parts = size.split("x")
    if len(parts) != 2:
        raise ResampleError(f"invalid icon size: {size!r}")
    try:
        w, h = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise ResampleError(f"invalid icon size: {size!r}") from e
    if w <= 0 or h <= 0:
        raise ResampleError(f"invalid icon size: {size!r}")
    return w, h


def parse_scale(scale: str | None) -> float:
    """解析 `2x` 形式的缩放倍数；`None` 视为 1 倍。"""
    if scale is None:
        return 1.0
    raw = scale.strip()
    if not raw.endswith("x"):
        raise ResampleError(f"invalid scale token: {scale!r}")
    try:
        value = float(raw[:-1])
    except ValueError as e:
        raise ResampleError(f"invalid scale token: {scale!r}") from e
    if value <= 0:
        raise ResampleError(f"invalid scale token: {scale!r}")
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def pixel_size(spec: IconSpec) -> tuple[int, int]:
    """计算规格对应的像素尺寸。"""
    w, h = parse_size(spec.size)
    factor = parse_scale(spec.scale)
    return _round_half_up(w * factor), _round_half_up(h * factor)


def output_filename(spec: IconSpec) -> str:
    """由尺寸与倍数确定的输出文件名，重复运行时覆盖而不是新增。"""
    size_token = spec.size.replace(".", "_")
    scale_token = f"@{spec.scale}" if spec.scale else ""
    return f"icon-{size_token}{scale_token}.png"


def load_source(path: str) -> Image.Image:
    """完整解码源图片；无法解码时抛出 `DecodeError`。"""
    try:
        with Image.open(path) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA"):
                return img.convert("RGBA")
            return img.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"cannot decode image: {path}: {e}") from e


def resize(image: Image.Image, spec: IconSpec) -> tuple[bytes, int, int]:
    """按规格缩放并编码为 PNG，返回 `(png_bytes, width, height)`。"""
    if spec.is_source:
        raise ResampleError(f"source entry {spec.size} is not a resample target")
    width, height = pixel_size(spec)

    try:
        resized = image.resize((width, height), Image.Resampling.LANCZOS)
    except (ValueError, OSError) as e:
        raise ResampleError(f"failed to resize to {width}x{height}: {e}") from e

    buf = BytesIO()
    try:
        resized.save(buf, format="PNG")
    except (ValueError, OSError) as e:
        raise EncodeError(f"failed to encode {width}x{height} PNG: {e}") from e
    return buf.getvalue(), width, height
