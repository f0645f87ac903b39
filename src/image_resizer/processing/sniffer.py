"""基于文件内容（而非扩展名）的图片类型识别。"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Optional

from PIL import Image

from image_resizer.core.exceptions import UnknownTypeError, UnreadableFileError, UnsupportedFormatError

LOGGER = logging.getLogger(__name__)

# 与 Pillow 的 Image.open 一致：签名判断只看前 16 字节
SIGNATURE_BYTES = 16

SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}
# 多图 JPEG（相机常见）的文件签名与 JPEG 相同
_FORMAT_ALIASES = {"MPO": "image/jpeg"}


def sniff_mime_type(path: Path) -> str:
    """读取文件开头的字节，按签名返回 MIME 类型。

    只做签名匹配，不解析文件头；签名正确但内容损坏的文件会在解码阶段失败。
    """

    prefix = _read_prefix(path)
    image_format = _match_signature(prefix)
    if image_format is None:
        raise UnknownTypeError(f"无法识别文件类型: {path}")

    mime_type = _FORMAT_ALIASES.get(image_format) or Image.MIME.get(image_format)
    if not mime_type:
        # 少数插件没有登记 MIME
        mime_type = f"image/x-{image_format.lower()}"
    LOGGER.debug("识别 %s 为 %s", path, mime_type)
    return mime_type


def ensure_supported(path: Path) -> str:
    """识别类型并确认属于受支持的四种格式。"""

    mime_type = sniff_mime_type(path)
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise UnsupportedFormatError(f"不支持的格式: {path.name}（识别为 {mime_type}）")
    return mime_type


def _read_prefix(path: Path) -> bytes:
    try:
        with open(path, "rb") as handle:
            return handle.read(SIGNATURE_BYTES)
    except OSError as exc:
        raise UnreadableFileError(f"读取文件失败: {path} ({exc})") from exc


def _match_signature(prefix: bytes) -> Optional[str]:
    """按 Pillow 插件注册顺序逐个调用其签名检查函数。"""

    if not prefix:
        return None

    Image.init()
    for image_format in Image.ID:
        _factory, accept = Image.OPEN[image_format]
        if accept is None:
            # 没有签名函数的插件只能靠完整解析文件头识别
            continue
        try:
            result = accept(prefix)
        except (IndexError, TypeError, ValueError, struct.error):
            continue
        # 返回字符串表示“格式相似但不支持”的提示，不算匹配
        if result and not isinstance(result, str):
            return image_format
    return None
