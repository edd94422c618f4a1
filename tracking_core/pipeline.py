from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import numpy as np

from .mode import ModeController
from .types import FrameResult

logger = logging.getLogger(__name__)


class InferencePipeline:
    """每帧一个推理任务（Future），任意时刻最多一个任务在途。

    在途期间送来的新帧直接丢弃并计数，不排队。
    """

    def __init__(self, modes: ModeController):
        self._modes = modes
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inference")
        self._lock = threading.Lock()
        self._in_flight: Optional[Future] = None
        self._dropped = 0
        self._closed = False

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._in_flight is not None

    @property
    def dropped_frames(self) -> int:
        return self._dropped

    def submit(self, frame: np.ndarray) -> Optional["Future[FrameResult]"]:
        """提交一帧进行推理。

        输入: frame 为 BGR 图像。
        输出: 推理任务的 Future；已有任务在途、模式关闭或已关闭时返回 None。
        作用: 提交时确定检测器，之后的模式切换只影响下一帧。
        """
        if self._closed:
            return None
        detector = self._modes.active_detector()
        if detector is None:
            return None

        with self._lock:
            if self._in_flight is not None:
                self._dropped += 1
                if self._dropped % 100 == 0:
                    logger.debug("推理繁忙，已丢弃 %d 帧", self._dropped)
                return None
            fut = self._executor.submit(detector.detect, frame)
            self._in_flight = fut
        fut.add_done_callback(self._release_slot)
        return fut

    def _release_slot(self, fut: Future) -> None:
        with self._lock:
            if self._in_flight is fut:
                self._in_flight = None
        exc = fut.exception() if not fut.cancelled() else None
        if exc is not None:
            logger.error("推理失败: %s", exc)

    def shutdown(self, wait: bool = True) -> None:
        """停止接收新帧；wait=True 时等待在途任务完成。"""
        self._closed = True
        self._executor.shutdown(wait=wait)
