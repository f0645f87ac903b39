"""项目内使用的自定义异常定义。"""


class ImageResizerError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(ImageResizerError):
    """配置不合法时抛出。"""


class SourceNotFoundError(ImageResizerError):
    """输入目录不存在，整批任务无法开始。"""


class UnsupportedFormatError(ImageResizerError):
    """文件内容不是受支持的图片类型。"""


class UnknownTypeError(UnsupportedFormatError):
    """文件头无法匹配任何已知图片签名。"""


class UnreadableFileError(ImageResizerError):
    """读取文件失败（权限、文件消失等）。"""


class MissingDimensionError(ImageResizerError):
    """保持宽高比时既没有宽度也没有高度。"""


class InvalidDimensionError(ImageResizerError):
    """计算得到的目标尺寸不可用（例如为 0）。"""


class DecodeError(ImageResizerError):
    """图片数据损坏或无法解码。"""


class EncodeError(ImageResizerError):
    """输出写入失败。"""


class FileBrowserError(ImageResizerError):
    """无法启动系统文件管理器。"""
