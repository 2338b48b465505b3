"""
同步流程的错误分类。

所有错误都视为需要操作者处理的问题（修正输入后重跑），流程不做自动重试。
"""


class SyncError(RuntimeError):
    """同步流程错误基类。"""

    @property
    def kind(self) -> str:
        return type(self).__name__


class InputValidationError(SyncError):
    """输入路径缺失或类型不符。"""


class NoSourceImages(SyncError):
    """图标目录中没有 PNG/JPG 源图片。"""


class ManifestError(SyncError):
    """`Contents.json` 无法读取或结构不合法。"""


class MissingSourceEntry(ManifestError):
    """`Contents.json` 中没有可用的 1024x1024 源图条目。"""


class SourceFileMissing(ManifestError):
    """1024x1024 条目引用的文件不在图标集目录中。"""


class DecodeError(SyncError):
    """源图片无法解码。"""


class ResampleError(SyncError):
    """尺寸/倍数非法或缩放失败。"""


class EncodeError(SyncError):
    """缩放结果无法编码为 PNG。"""


class MetadataParseError(SyncError):
    """`Info.plist` 无法解析或结构不合法。"""


class MetadataWriteError(SyncError):
    """`Info.plist` 写回失败。"""


class BuildFileReadError(SyncError):
    """`project.pbxproj` 读取失败。"""


class BuildFileWriteError(SyncError):
    """`project.pbxproj` 写回失败。"""


class FilesystemError(SyncError):
    """创建、复制或删除文件/目录失败。"""
