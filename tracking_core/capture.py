from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)

FACING_USER = "user"
FACING_ENVIRONMENT = "environment"


class CaptureError(RuntimeError):
    pass


@dataclass(frozen=True)
class CameraConfig:
    index: int = 0
    width: int = 640
    height: int = 480
    # "user" 前置（画面镜像）/ "environment" 后置
    facing_mode: str = FACING_ENVIRONMENT


class CameraSource(ABC):
    """视频源接口：逐帧读取，用完释放。"""

    @abstractmethod
    def read(self) -> tuple[bool, Optional[np.ndarray]]: ...

    @abstractmethod
    def release(self) -> None: ...


class OpenCVCamera(CameraSource):
    def __init__(self, config: Optional[CameraConfig] = None):
        self._config = config or CameraConfig()
        self._cap = cv2.VideoCapture(self._config.index)
        if not self._cap.isOpened():
            self._cap.release()
            raise CaptureError(f"无法打开摄像头 {self._config.index}")

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._config.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._config.height)
        self._mirror = self._config.facing_mode == FACING_USER

    def read(self) -> tuple[bool, Optional[np.ndarray]]:
        ok, frame = self._cap.read()
        if not ok:
            return False, None
        if self._mirror:
            frame = cv2.flip(frame, 1)
        return True, frame

    def release(self) -> None:
        if self._cap.isOpened():
            self._cap.release()


class CaptureLifecycle:
    """摄像头流的启动 / 停止，并把每一帧立即交给回调（不做缓冲）。"""

    def __init__(self, source_factory: Callable[[], CameraSource],
                 on_frame: Optional[Callable[[np.ndarray], None]] = None):
        self._source_factory = source_factory
        self._on_frame = on_frame
        self._source: Optional[CameraSource] = None

    @property
    def is_running(self) -> bool:
        return self._source is not None

    def bind(self, on_frame: Callable[[np.ndarray], None]) -> None:
        """重新绑定帧回调，下一帧起生效。"""
        self._on_frame = on_frame

    def start(self) -> None:
        """启动采集：已有流时先停止，再打开新的流。

        打开失败时抛出 CaptureError，此时不持有任何流。
        """
        if self._source is not None:
            self.stop()
        self._source = self._source_factory()
        logger.info("摄像头已启动")

    def stop(self) -> None:
        """释放当前流；没有流时什么都不做。"""
        source = self._source
        if source is None:
            return
        self._source = None
        source.release()
        logger.info("摄像头已停止")

    def poll(self) -> bool:
        """读取一帧并立即转发给回调。

        输出: 成功读到并转发返回 True；未启动或读取失败返回 False。
        作用: 读取失败视为流结束，自动停止。
        """
        if self._source is None:
            return False
        ok, frame = self._source.read()
        if not ok or frame is None:
            logger.warning("读取摄像头帧失败，停止采集")
            self.stop()
            return False
        if self._on_frame is not None:
            self._on_frame(frame)
        return True
