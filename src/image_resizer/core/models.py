"""核心数据模型定义。"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Optional

SUCCESS_MESSAGE = "图片缩放成功。"
ALREADY_EXISTS_MESSAGE = "目标文件已存在，跳过。"
UNSUPPORTED_EXTENSION_MESSAGE = "不支持的文件格式。"


@dataclass(frozen=True, slots=True)
class FileTask:
    """扫描阶段为每个候选文件生成的任务。"""

    source_path: Path
    destination: Path
    discovered_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True, slots=True)
class FileOutcome(ABC):
    """单个文件的最终处理结果。只会以下列四个子类出现。"""

    status: ClassVar[str] = ""

    source_path: Path
    timestamp: datetime

    @property
    def output_path(self) -> Optional[Path]:
        return None

    @property
    @abstractmethod
    def message(self) -> str:
        """面向用户的说明文字。"""


@dataclass(frozen=True, slots=True)
class Success(FileOutcome):
    status: ClassVar[str] = "success"

    destination: Path
    note: str = SUCCESS_MESSAGE

    @property
    def output_path(self) -> Optional[Path]:
        return self.destination

    @property
    def message(self) -> str:
        return self.note


@dataclass(frozen=True, slots=True)
class Skipped(FileOutcome):
    status: ClassVar[str] = "skipped"

    destination: Path
    reason: str = ALREADY_EXISTS_MESSAGE

    @property
    def output_path(self) -> Optional[Path]:
        return self.destination

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class UnsupportedFormat(FileOutcome):
    status: ClassVar[str] = "unsupported_format"

    reason: str = UNSUPPORTED_EXTENSION_MESSAGE

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class Failed(FileOutcome):
    status: ClassVar[str] = "error"

    error: str
    destination: Optional[Path] = None

    @property
    def output_path(self) -> Optional[Path]:
        return self.destination

    @property
    def message(self) -> str:
        return self.error


class OutcomeCollector:
    """多个 worker 共享的结果集合，每次追加都在锁内完成。"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[FileOutcome] = []

    def add(self, outcome: FileOutcome) -> int:
        """追加一条结果，返回追加后的总数。"""

        with self._lock:
            self._outcomes.append(outcome)
            return len(self._outcomes)

    def snapshot(self) -> list[FileOutcome]:
        with self._lock:
            return list(self._outcomes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)


@dataclass(slots=True)
class BatchReport:
    """整批任务的汇总报告。"""

    output_folder: Path
    elapsed: float
    outcomes: tuple[FileOutcome, ...]

    @property
    def succeeded(self) -> list[FileOutcome]:
        return self._by_status(Success.status)

    @property
    def skipped(self) -> list[FileOutcome]:
        return self._by_status(Skipped.status)

    @property
    def unsupported(self) -> list[FileOutcome]:
        return self._by_status(UnsupportedFormat.status)

    @property
    def failed(self) -> list[FileOutcome]:
        return self._by_status(Failed.status)

    def counts(self) -> dict[str, int]:
        """按状态统计数量，便于输出摘要。"""

        counts = {status: 0 for status in (Success.status, Skipped.status, UnsupportedFormat.status, Failed.status)}
        for outcome in self.outcomes:
            counts[outcome.status] += 1
        return counts

    def _by_status(self, status: str) -> list[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == status]
