from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from tracking_core.config import AppConfig
from tracking_core.session import TrackingSession

logger = logging.getLogger(__name__)


class TrackingWebController:
    """浏览器端控制器：摄像头由浏览器采集，服务端只负责推理与绘制。"""

    def __init__(self, config: Optional[AppConfig] = None, session: Optional[TrackingSession] = None) -> None:
        self.session = session or TrackingSession(config)
        # 开始/停止只控制是否处理浏览器推来的帧
        self._active: bool = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> str:
        self._active = True
        logger.info("浏览器采集已开始")
        return "已开始：请允许浏览器使用摄像头"

    def stop(self) -> str:
        """停止处理；之后到达的帧不再绘制。"""
        self._active = False
        logger.info("浏览器采集已停止")
        return "已停止"

    def set_hands_mode(self, enabled: bool) -> tuple[bool, bool]:
        return self.session.set_hands_mode(bool(enabled))

    def set_holistic_mode(self, enabled: bool) -> tuple[bool, bool]:
        return self.session.set_holistic_mode(bool(enabled))

    def set_show_angles(self, enabled: bool) -> None:
        self.session.set_show_angles(bool(enabled))

    def process(self, frame_rgb: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """处理浏览器推来的一帧（RGB）。

        输入: frame_rgb 为 (h,w,3) RGB 图像，可为 None。
        输出: 绘制后的 RGB 画布；未开始或无帧时返回 None。
        """
        if not self._active or frame_rgb is None:
            return None
        frame_bgr = cv2.cvtColor(frame_rgb, cv2.COLOR_RGB2BGR)
        canvas = self.session.process_frame(frame_bgr)
        if canvas is None:
            return None
        return cv2.cvtColor(canvas, cv2.COLOR_BGR2RGB)

    def close(self) -> None:
        self._active = False
        self.session.close()
