"""
同步流程各组件共享的轻量类型定义。
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

# 日志输出通道：接收一行消息，由调用方决定如何展示。
LogSink = Callable[[str], None]


class Mode(Enum):
    """一次同步的模式。"""

    # - `add`：保留已有图标集与注册项，仅补充新增项。
    # - `replace`：删除全部备用图标后按源图片重建。
    # - `remove-all`：删除全部备用图标，不生成新内容。
    ADD = "add"
    REPLACE = "replace"
    REMOVE_ALL = "remove-all"


@dataclass(frozen=True)
class IconSpec:
    """图标尺寸表中的一项输出规格。"""

    idiom: str
    platform: str | None
    # 逻辑尺寸（point），形如 `83.5x83.5`。
    size: str
    # 缩放倍数，形如 `2x`；为 `None` 时表示直接使用源图。
    scale: str | None = None

    @property
    def is_source(self) -> bool:
        return self.size == "1024x1024" and self.scale is None


@dataclass(frozen=True)
class ResizedImage:
    """图标集中的一张最终图片及其在 `Contents.json` 里的描述。"""

    filename: str
    idiom: str
    platform: str | None
    size: str
    scale: str | None = None

    @classmethod
    def from_spec(cls, spec: IconSpec, filename: str) -> "ResizedImage":
        return cls(
            filename=filename,
            idiom=spec.idiom,
            platform=spec.platform,
            size=spec.size,
            scale=spec.scale,
        )

    def manifest_entry(self) -> dict[str, str]:
        """转换为 `Contents.json` 中 `images` 数组的一项，省略空字段。"""
        entry = {"filename": self.filename, "idiom": self.idiom, "size": self.size}
        if self.platform is not None:
            entry["platform"] = self.platform
        if self.scale is not None:
            entry["scale"] = self.scale
        return entry
