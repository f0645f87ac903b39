"""命令行入口。"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from image_resizer.core.config import ResizeRequest, default_worker_count
from image_resizer.core.exceptions import FileBrowserError, ImageResizerError, SourceNotFoundError
from image_resizer.core.progress import ProgressUpdate
from image_resizer.core.report import report_to_dict, write_csv_report
from image_resizer.processing.pipeline import run_batch
from image_resizer.utils.file_browser import open_in_file_browser
from image_resizer.utils.logging import setup_logging

app = typer.Typer(help="批量图片缩放工具。")


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("缩放图片", total=update.total)
        progress.update(task_id, completed=update.completed)
        if update.finished:
            progress.update(task_id, description="完成")

    return callback


@app.command("run")
def run_cli(  # noqa: PLR0913
    source: Path = typer.Argument(..., help="源图片目录（不递归）"),
    output: Path = typer.Option(..., "--output", "-o", help="输出目录"),
    width: Optional[int] = typer.Option(None, "--width", min=0, help="目标宽度"),
    height: Optional[int] = typer.Option(None, "--height", min=0, help="目标高度"),
    keep_aspect: bool = typer.Option(False, "--keep-aspect/--no-keep-aspect", help="是否保持宽高比"),
    overwrite: bool = typer.Option(False, "--overwrite", help="覆盖已存在的输出文件"),
    max_workers: int = typer.Option(default_worker_count(), "--workers", "-w", min=1, help="并发数量"),
    executor: str = typer.Option("thread", "--executor", help="并发模式，thread 或 process"),
    as_json: bool = typer.Option(False, "--json", help="以 JSON 输出完整报告"),
    csv_report: Optional[Path] = typer.Option(None, "--csv-report", help="额外写出 CSV 报告的路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """执行批量缩放。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)
    logging.getLogger(__name__).debug("CLI 参数解析完成")

    try:
        request = ResizeRequest(
            input_folder=source.expanduser().resolve(),
            output_folder=output.expanduser().resolve(),
            width=width,
            height=height,
            keep_aspect_ratio=keep_aspect,
            overwrite=overwrite,
            max_workers=max_workers,
            executor=executor,
        )
    except ImageResizerError as exc:
        raise typer.BadParameter(str(exc)) from exc

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=Console(stderr=as_json),
    )

    try:
        with progress:
            report = run_batch(request, progress_callback=_build_progress_callback(progress))
    except SourceNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if csv_report is not None:
        write_csv_report(report, csv_report.expanduser().resolve())

    if as_json:
        typer.echo(json.dumps(report_to_dict(report), ensure_ascii=False, indent=2))
        return

    for outcome in report.failed:
        typer.echo(f"失败：{outcome.source_path.name} - {outcome.message}", err=True)

    counts = report.counts()
    typer.echo(
        f"处理完成：成功 {counts['success']} 张，跳过 {counts['skipped']} 张，"
        f"不支持 {counts['unsupported_format']} 个，失败 {counts['error']} 张，"
        f"耗时 {report.elapsed:.2f} 秒。"
    )
    typer.echo(f"输出目录：{report.output_folder}")
    if csv_report is not None:
        typer.echo(f"报告文件：{csv_report}")


@app.command("open")
def open_cli(path: Path = typer.Argument(..., help="要在文件管理器中打开的路径")) -> None:
    """在系统文件管理器中打开目录。"""

    try:
        open_in_file_browser(path.expanduser())
    except FileBrowserError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
