"""报告生成工具。"""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Any

from image_resizer.core.models import BatchReport, FileOutcome

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
HEADER = ["file", "output_file", "timestamp", "status", "message"]


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def format_processing_time(elapsed: float) -> str:
    """耗时格式化为 ``"1.23 seconds"``。"""

    return f"{elapsed:.2f} seconds"


def outcome_to_dict(outcome: FileOutcome) -> dict[str, Any]:
    """单条结果的对外结构；只有计算过输出路径时才带 ``output_file``。"""

    payload: dict[str, Any] = {"file": str(outcome.source_path)}
    if outcome.output_path is not None:
        payload["output_file"] = str(outcome.output_path)
    payload["timestamp"] = format_timestamp(outcome.timestamp)
    payload["status"] = outcome.status
    payload["message"] = outcome.message
    return payload


def report_to_dict(report: BatchReport) -> dict[str, Any]:
    return {
        "output_folder": str(report.output_folder),
        "processing_time": format_processing_time(report.elapsed),
        "results": [outcome_to_dict(outcome) for outcome in report.outcomes],
    }


def write_csv_report(report: BatchReport, report_path: Path) -> Path:
    """将处理结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in report.outcomes:
            writer.writerow(
                [
                    str(record.source_path),
                    str(record.output_path) if record.output_path else "",
                    format_timestamp(record.timestamp),
                    record.status,
                    record.message,
                ]
            )
    return report_path
