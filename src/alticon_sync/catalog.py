"""
iOS 备用图标所需的固定尺寸表。

生成的文件名与 `Contents.json` 条目顺序都按本表顺序，保证多次运行结果一致。
"""

from .types import IconSpec

SOURCE_SIZE = "1024x1024"


def _ios(size: str, scale: str | None = None) -> IconSpec:
    return IconSpec(idiom="universal", platform="ios", size=size, scale=scale)


ICON_SPECS: tuple[IconSpec, ...] = (
    _ios("20x20", "2x"),
    _ios("20x20", "3x"),
    _ios("29x29", "2x"),
    _ios("29x29", "3x"),
    _ios("38x38", "2x"),
    _ios("38x38", "3x"),
    _ios("40x40", "2x"),
    _ios("40x40", "3x"),
    _ios("60x60", "2x"),
    _ios("60x60", "3x"),
    _ios("64x64", "2x"),
    _ios("64x64", "3x"),
    _ios("68x68", "2x"),
    _ios("76x76", "2x"),
    _ios("83.5x83.5", "2x"),
    # 源图本身，不参与缩放。
    _ios(SOURCE_SIZE),
)


def source_spec(specs: tuple[IconSpec, ...] = ICON_SPECS) -> IconSpec:
    """返回尺寸表中代表源图的那一项。"""
    for spec in specs:
        if spec.is_source:
            return spec
    raise ValueError("icon catalog has no 1024x1024 source entry")
