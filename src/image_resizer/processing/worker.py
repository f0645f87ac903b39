"""并发处理的工作单元：单个文件从存在性检查到写出的完整流程。"""

from __future__ import annotations

from datetime import datetime

from image_resizer.core.config import ResizeRequest
from image_resizer.core.exceptions import ImageResizerError, UnreadableFileError, UnsupportedFormatError
from image_resizer.core.models import Failed, FileOutcome, FileTask, Skipped, Success, UnsupportedFormat
from image_resizer.core.output_manager import OutputManager
from image_resizer.processing.planner import plan_dimensions
from image_resizer.processing.sniffer import ensure_supported
from image_resizer.processing.transcoder import open_source, oriented_size, transcode


def run_task(task: FileTask, request: ResizeRequest) -> FileOutcome:
    """处理单个文件并返回唯一的结果记录。

    单文件的所有已知错误都在这里转换为结果，不向外抛出。
    """

    output_manager = OutputManager(request.output_folder, overwrite=request.overwrite)
    if output_manager.should_skip(task.destination):
        return Skipped(source_path=task.source_path, timestamp=datetime.now(), destination=task.destination)

    try:
        ensure_supported(task.source_path)
    except UnsupportedFormatError as exc:
        return UnsupportedFormat(source_path=task.source_path, timestamp=datetime.now(), reason=str(exc))
    except UnreadableFileError as exc:
        return _failed(task, exc)

    try:
        with open_source(task.source_path) as image:
            size = plan_dimensions(
                oriented_size(image),
                request.width,
                request.height,
                request.keep_aspect_ratio,
            )
            transcode(image, task.destination, size)
    except ImageResizerError as exc:
        return _failed(task, exc)

    return Success(source_path=task.source_path, timestamp=datetime.now(), destination=task.destination)


def _failed(task: FileTask, exc: Exception) -> Failed:
    return Failed(
        source_path=task.source_path,
        timestamp=datetime.now(),
        error=str(exc),
        destination=task.destination,
    )
