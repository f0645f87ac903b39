"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """协调线程发出的进度快照。``status`` 为 running 或 finished。"""

    total: int
    completed: int
    message: Optional[str] = None
    status: str = "running"

    @property
    def finished(self) -> bool:
        return self.status == "finished"
