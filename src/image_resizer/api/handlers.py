"""请求/响应边界：接收字典形式的请求，返回可序列化的报告。"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from image_resizer.core.config import ResizeRequest, default_worker_count
from image_resizer.core.exceptions import InvalidConfigurationError
from image_resizer.core.report import report_to_dict
from image_resizer.processing.pipeline import run_batch
from image_resizer.utils.file_browser import open_in_file_browser

REQUIRED_FIELDS = ("input_folder", "output_folder")


def build_request(payload: Mapping[str, Any]) -> ResizeRequest:
    """把外部请求字典转换为 ``ResizeRequest``。"""

    missing = [name for name in REQUIRED_FIELDS if not payload.get(name)]
    if missing:
        raise InvalidConfigurationError(f"缺少必填字段: {', '.join(missing)}")

    return ResizeRequest(
        input_folder=Path(payload["input_folder"]),
        output_folder=Path(payload["output_folder"]),
        width=_optional_uint(payload.get("width"), "width"),
        height=_optional_uint(payload.get("height"), "height"),
        keep_aspect_ratio=_flag(payload.get("keep_aspect_ratio", False), "keep_aspect_ratio"),
        overwrite=_flag(payload.get("overwrite", False), "overwrite"),
        max_workers=_worker_count(payload.get("max_workers")),
        executor=payload.get("executor") or "thread",
    )


def process_images(payload: Mapping[str, Any]) -> dict[str, Any]:
    """执行一次批量缩放并返回报告字典。

    输入目录不存在时抛出 ``SourceNotFoundError``。
    """

    report = run_batch(build_request(payload))
    return report_to_dict(report)


def open_file_explorer(path: str) -> None:
    open_in_file_browser(path)


def _worker_count(value: Any) -> int:
    count = _optional_uint(value, "max_workers")
    if count is None:
        return default_worker_count()
    if count < 1:
        raise InvalidConfigurationError(f"max_workers 必须大于 0: {value!r}")
    return count


def _optional_uint(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigurationError(f"{name} 必须是非负整数: {value!r}")
    return value


def _flag(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidConfigurationError(f"{name} 必须是布尔值: {value!r}")
    return value
