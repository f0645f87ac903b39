"""图片解码、缩放与写出。"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps

from image_resizer.core.exceptions import DecodeError, InvalidDimensionError, UnreadableFileError
from image_resizer.core.output_manager import save_image_file

_RESAMPLING = getattr(Image, "Resampling", Image)
RESAMPLE_FILTER = _RESAMPLING.LANCZOS

EXIF_ORIENTATION_TAG = 274
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}
# 这些格式的 EXIF 位于文件头，读取方向信息无需解码像素。
_HEADER_EXIF_FORMATS = {"JPEG", "MPO", "WEBP"}

LOGGER = logging.getLogger(__name__)

# Pillow 解析损坏文件时可能抛出的异常（UnidentifiedImageError 属于 OSError）
_DECODE_FAILURES = (
    OSError,
    EOFError,
    SyntaxError,
    ValueError,
    IndexError,
    TypeError,
    struct.error,
    Image.DecompressionBombError,
)


def open_source(path: Path) -> Image.Image:
    """延迟打开图片，只读取头部信息。调用者负责关闭。

    文件本身无法访问时为读取错误，其余失败（签名之后的头部损坏等）一律视为解码错误。
    """

    try:
        return Image.open(path)
    except (FileNotFoundError, IsADirectoryError, PermissionError) as exc:
        raise UnreadableFileError(f"读取文件失败: {path} ({exc})") from exc
    except _DECODE_FAILURES as exc:
        raise DecodeError(f"无法解码图像: {path.name} ({exc})") from exc


def oriented_size(image: Image.Image) -> Tuple[int, int]:
    """考虑 EXIF 方向后的显示尺寸，不解码像素数据。"""

    width, height = image.size
    if image.format not in _HEADER_EXIF_FORMATS:
        return width, height

    try:
        orientation = image.getexif().get(EXIF_ORIENTATION_TAG, 1)
    except (OSError, ValueError) as exc:
        LOGGER.debug("读取 EXIF 失败，按原始方向处理: %s", exc)
        return width, height

    if orientation in _TRANSPOSED_ORIENTATIONS:
        return height, width
    return width, height


def decode(image: Image.Image) -> Image.Image:
    """完整解码并执行 EXIF 旋转与模式归一化。

    返回新的 Image 对象，调用者负责关闭。
    """

    try:
        image.load()
        if image.format in _HEADER_EXIF_FORMATS:
            oriented = ImageOps.exif_transpose(image)
        else:
            oriented = image.copy()
    except _DECODE_FAILURES as exc:
        LOGGER.debug("解码失败: %s", exc)
        raise DecodeError(f"无法解码图像: {exc}") from exc

    normalized = _normalize_mode(oriented)
    if normalized is not oriented:
        oriented.close()
    return normalized


def transcode(image: Image.Image, destination: Path, size: Tuple[int, int]) -> None:
    """按计划尺寸使用 Lanczos 重采样缩放，并写入目标路径。

    任一边小于 1 像素时直接失败，不会解码源图。
    """

    width, height = size
    if width <= 0 or height <= 0:
        raise InvalidDimensionError(f"目标尺寸无效: {width}x{height}")

    decoded = decode(image)
    try:
        resized = decoded.resize((width, height), RESAMPLE_FILTER)
    except (OSError, ValueError) as exc:
        raise DecodeError(f"缩放失败: {exc}") from exc
    finally:
        decoded.close()

    try:
        save_image_file(resized, destination)
    finally:
        resized.close()


def _normalize_mode(img: Image.Image) -> Image.Image:
    """调色板与二值图像转换为真彩色，保证重采样滤镜生效。"""

    if img.mode in {"P", "PA"}:
        has_alpha = img.mode == "PA" or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")

    if img.mode == "1":
        return img.convert("L")

    return img
