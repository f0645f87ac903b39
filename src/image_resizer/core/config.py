"""批量缩放任务的配置模型。"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from image_resizer.core.exceptions import InvalidConfigurationError

EXECUTOR_KINDS = {"thread", "process"}


def default_worker_count() -> int:
    """默认并发数：CPU 核心数，上限 32。"""

    return max(1, min(32, os.cpu_count() or 1))


@dataclass(frozen=True, slots=True)
class ResizeRequest:
    """单次批处理请求，提交后不可变。

    ``keep_aspect_ratio`` 需要的宽/高至少一项在逐文件规划时才校验，
    这样错误能归属到具体文件。
    """

    input_folder: Path
    output_folder: Path
    width: Optional[int] = None
    height: Optional[int] = None
    keep_aspect_ratio: bool = False
    overwrite: bool = False
    max_workers: int = field(default_factory=default_worker_count)
    executor: str = "thread"  # thread | process

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidConfigurationError(f"{name} 不能为负数: {value}")
        if self.max_workers < 1:
            raise InvalidConfigurationError("max_workers 必须大于 0")
        if self.executor not in EXECUTOR_KINDS:
            raise InvalidConfigurationError(f"未知的并发模式: {self.executor}")
