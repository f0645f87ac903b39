"""处理流水线：扫描目录、并发执行缩放任务并汇总报告。"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Callable, Optional

from image_resizer.core.config import ResizeRequest
from image_resizer.core.exceptions import SourceNotFoundError
from image_resizer.core.models import (
    BatchReport,
    Failed,
    FileOutcome,
    FileTask,
    OutcomeCollector,
    Skipped,
    Success,
    UnsupportedFormat,
)
from image_resizer.core.output_manager import OutputManager
from image_resizer.core.progress import ProgressUpdate
from image_resizer.core.report import format_timestamp
from image_resizer.core.scanner import scan_directory
from image_resizer.processing.worker import run_task

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def run_batch(request: ResizeRequest, progress_callback: ProgressCallback = None) -> BatchReport:
    """批量缩放入口：扫描、并发处理、等待全部完成后生成报告。

    只有输入目录不存在会中断整批任务，单个文件的失败只体现在报告中。
    """

    started = time.perf_counter()
    source_dir = request.input_folder
    if not source_dir.is_dir():
        raise SourceNotFoundError(f"输入目录不存在: {source_dir}")

    LOGGER.info("开始扫描输入目录 %s", source_dir)
    try:
        scan = scan_directory(source_dir)
    except OSError as exc:
        raise SourceNotFoundError(f"无法读取输入目录: {source_dir} ({exc})") from exc

    total = scan.total
    LOGGER.info("发现 %d 个条目，其中 %d 个候选图片", total, len(scan.candidates))

    collector = OutcomeCollector()
    tracker = _ProgressTracker(progress_callback, total)

    for entry in scan.rejected:
        outcome = UnsupportedFormat(source_path=entry, timestamp=datetime.now())
        collector.add(outcome)
        tracker.advance(outcome)

    output_manager = OutputManager(request.output_folder, overwrite=request.overwrite)
    tasks = [
        FileTask(source_path=path, destination=output_manager.destination_for(path))
        for path in scan.candidates
    ]

    if tasks:
        try:
            output_manager.ensure_output_dir()
        except OSError as exc:
            # 写出阶段会逐个文件记录失败
            LOGGER.error("创建输出目录失败：%s", exc)
        tracker.emit("开始执行处理任务")
        _dispatch(tasks, request, collector, tracker)

    outcomes = sorted(collector.snapshot(), key=lambda x: str(x.source_path).lower())
    elapsed = time.perf_counter() - started
    report = BatchReport(output_folder=request.output_folder, elapsed=elapsed, outcomes=tuple(outcomes))

    counts = report.counts()
    LOGGER.info(
        "处理完成：成功 %d，跳过 %d，不支持 %d，失败 %d，耗时 %.2f 秒",
        counts[Success.status],
        counts[Skipped.status],
        counts[UnsupportedFormat.status],
        counts[Failed.status],
        elapsed,
    )
    tracker.emit("处理完成", status="finished")
    return report


def _dispatch(
    tasks: list[FileTask],
    request: ResizeRequest,
    collector: OutcomeCollector,
    tracker: "_ProgressTracker",
) -> None:
    """按配置的并发上限执行任务，返回前所有任务都已产出结果。"""

    if request.max_workers <= 1:
        for task in tasks:
            tracker.advance(_execute(task, request, collector))
        return

    if request.executor == "process":
        with ProcessPoolExecutor(max_workers=request.max_workers) as executor:
            future_map = {executor.submit(run_task, task, request): task for task in tasks}
            for future in as_completed(future_map):
                task = future_map[future]
                try:
                    outcome = future.result()
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("任务执行异常：%s", exc)
                    outcome = _worker_failure(task, exc)
                collector.add(outcome)
                tracker.advance(outcome)
        return

    with ThreadPoolExecutor(max_workers=request.max_workers, thread_name_prefix="resize") as executor:
        futures = [executor.submit(_execute, task, request, collector) for task in tasks]
        for future in as_completed(futures):
            tracker.advance(future.result())


def _execute(task: FileTask, request: ResizeRequest, collector: OutcomeCollector) -> FileOutcome:
    """在当前线程内处理任务并写入共享结果集（恰好一次）。"""

    try:
        outcome = run_task(task, request)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("任务执行异常：%s", exc)
        outcome = _worker_failure(task, exc)
    collector.add(outcome)
    return outcome


def _worker_failure(task: FileTask, exc: BaseException) -> Failed:
    return Failed(
        source_path=task.source_path,
        timestamp=datetime.now(),
        error=f"未预期的错误: {exc}",
        destination=task.destination,
    )


def log_outcome(outcome: FileOutcome) -> None:
    """把单条结果写入日志；处理逻辑本身不打印任何内容。"""

    if isinstance(outcome, Success):
        LOGGER.info(
            "[Resized] [%s] %s -> %s",
            format_timestamp(outcome.timestamp),
            outcome.source_path,
            outcome.destination,
        )
    elif isinstance(outcome, Skipped):
        LOGGER.info("跳过输出（已存在）：%s", outcome.destination)
    elif isinstance(outcome, UnsupportedFormat):
        LOGGER.info("不支持的格式：%s (%s)", outcome.source_path, outcome.reason)
    else:
        LOGGER.warning("处理失败：%s (%s)", outcome.source_path, outcome.message)


class _ProgressTracker:
    """在协调线程中记录日志并回调进度。"""

    def __init__(self, callback: ProgressCallback, total: int) -> None:
        self._callback = callback
        self._total = total
        self._completed = 0

    def advance(self, outcome: FileOutcome) -> None:
        self._completed += 1
        log_outcome(outcome)
        self.emit(f"{outcome.status}: {outcome.source_path.name}")

    def emit(self, message: Optional[str] = None, status: str = "running") -> None:
        if not self._callback:
            return
        self._callback(
            ProgressUpdate(total=self._total, completed=self._completed, message=message, status=status)
        )
