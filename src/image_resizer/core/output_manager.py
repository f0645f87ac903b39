"""输出路径决策与图像写入模块。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from image_resizer.core.exceptions import EncodeError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".webp": "WEBP",
}


class OutputManager:
    """负责输出目录与已存在文件策略。"""

    def __init__(self, output_dir: Path, *, overwrite: bool = False) -> None:
        self.output_dir = output_dir
        self.overwrite = overwrite

    def ensure_output_dir(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def destination_for(self, source_path: Path) -> Path:
        """输出路径 = 输出目录 + 源文件名。"""

        return self.output_dir / source_path.name

    def should_skip(self, destination: Path) -> bool:
        """目标已存在且未允许覆盖时跳过。只做存在性检查，不读取内容。"""

        return destination.exists() and not self.overwrite


def save_image_file(image: Image.Image, destination: Path) -> None:
    """将 PIL Image 按目标扩展名对应的编码器保存到磁盘。"""

    suffix = destination.suffix.lower()
    image_format = SUPPORTED_FORMATS.get(suffix)
    if not image_format:
        raise EncodeError(f"不支持的输出格式: {suffix or destination.name}")

    save_params: dict = {}
    image_to_save = image
    if image_format == "JPEG":
        save_params.update(quality=95, subsampling=1, optimize=True)
        if image.mode != "RGB":
            image_to_save = flatten_to_rgb(image)
    elif image_format == "PNG":
        save_params["optimize"] = True
        if image.mode not in {"RGB", "RGBA", "L", "LA"}:
            image_to_save = image.convert("RGBA")
    elif image_format == "WEBP":
        save_params.update(quality=90)
        if image.mode not in {"RGB", "RGBA"}:
            image_to_save = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    try:
        image_to_save.save(destination, format=image_format, **save_params)
    except (OSError, ValueError) as exc:
        LOGGER.debug("写入失败 %s: %s", destination, exc)
        raise EncodeError(f"写入文件失败: {destination} ({exc})") from exc
    finally:
        if image_to_save is not image:
            image_to_save.close()


def flatten_to_rgb(img: Image.Image) -> Image.Image:
    """将任意模式图像转换为 RGB，透明区域以白色背景混合。"""

    if img.mode in {"RGBA", "LA"}:
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img.convert("RGBA"), mask=img.split()[-1])
        return background

    return img.convert("RGB")
