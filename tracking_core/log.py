from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "POSE_TRACKER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """配置根日志：单个输出到 stderr 的 handler。

    输入: level 日志级别名；环境变量 POSE_TRACKER_LOG_LEVEL 优先。
    """
    name = (os.environ.get(LOG_LEVEL_ENV) or level or "INFO").upper()
    lvl = getattr(logging, name, None)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logging.basicConfig(level=lvl, format=LOG_FORMAT, force=True)
