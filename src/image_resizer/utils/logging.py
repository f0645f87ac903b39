"""日志初始化工具。"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """初始化项目日志配置。

    Pillow 在 DEBUG 级别会逐个插件输出识别日志，这里固定为 INFO 以上。
    """

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("PIL").setLevel(max(level, logging.INFO))
