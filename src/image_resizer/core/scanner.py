"""输入目录扫描与扩展名预筛选。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


@dataclass(slots=True)
class ScanResult:
    """扫描结果：候选图片与被扩展名过滤掉的条目。"""

    candidates: list[Path]
    rejected: list[Path]

    @property
    def total(self) -> int:
        return len(self.candidates) + len(self.rejected)


def has_allowed_extension(path: Path) -> bool:
    """扩展名是否在白名单内（大小写不敏感）。"""

    return path.suffix.lower() in ALLOWED_EXTENSIONS


def _iter_entries(directory: Path) -> Iterator[Path]:
    """非递归遍历目录下的全部条目。"""

    yield from directory.iterdir()


def scan_directory(directory: Path) -> ScanResult:
    """扫描目录，目录本身必须存在。

    子目录等非普通文件一律归入 ``rejected``，不会进入解码流程。
    """

    candidates: list[Path] = []
    rejected: list[Path] = []

    for entry in _iter_entries(directory):
        if entry.is_file() and has_allowed_extension(entry):
            candidates.append(entry)
        else:
            rejected.append(entry)

    candidates.sort(key=lambda x: str(x).lower())
    rejected.sort(key=lambda x: str(x).lower())
    return ScanResult(candidates=candidates, rejected=rejected)
