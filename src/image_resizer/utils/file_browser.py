"""在系统文件管理器中打开路径。"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional

from image_resizer.core.exceptions import FileBrowserError

LOGGER = logging.getLogger(__name__)


def file_browser_command(path: str, platform: Optional[str] = None) -> list[str]:
    """根据平台返回打开文件管理器的命令。"""

    platform = platform or sys.platform
    if platform.startswith("win"):
        return ["explorer", path]
    if platform == "darwin":
        return ["open", path]
    return ["xdg-open", path]


def open_in_file_browser(path: Path | str, *, platform: Optional[str] = None) -> None:
    """启动文件管理器展示 ``path``，失败只影响本次调用。"""

    command = file_browser_command(str(path), platform)
    LOGGER.debug("启动文件管理器：%s", command)
    try:
        subprocess.Popen(command)  # noqa: S603
    except OSError as exc:
        raise FileBrowserError(f"无法打开文件管理器: {path} ({exc})") from exc
