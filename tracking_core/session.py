from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, Mapping, Optional

import numpy as np

from .capture import CameraSource, CaptureLifecycle, OpenCVCamera
from .config import AppConfig
from .detectors import HandsDetector, HolisticDetector
from .mode import DetectorFactory, ModeController
from .pipeline import InferencePipeline
from .renderer import OverlayRenderer
from .types import CaptureMode, FrameResult

logger = logging.getLogger(__name__)


def default_detector_factories(config: AppConfig) -> dict[CaptureMode, DetectorFactory]:
    return {
        CaptureMode.HANDS: lambda: HandsDetector(config.hands),
        CaptureMode.HOLISTIC: lambda: HolisticDetector(config.holistic),
    }


class TrackingSession:
    """一次页面/窗口会话的全部运行状态。

    持有模式控制、采集生命周期、推理管线、渲染器与显示选项，
    由前端控制器创建并显式传递，不使用全局变量。
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        detector_factories: Optional[Mapping[CaptureMode, DetectorFactory]] = None,
        source_factory: Optional[Callable[[], CameraSource]] = None,
    ):
        self.config = config or AppConfig()
        cfg = self.config

        self.modes = ModeController(detector_factories or default_detector_factories(cfg))
        self.capture = CaptureLifecycle(source_factory or (lambda: OpenCVCamera(cfg.camera)))
        self.pipeline = InferencePipeline(self.modes)
        self.renderer = OverlayRenderer(
            cfg.overlay.width,
            cfg.overlay.height,
            min_visibility=cfg.overlay.min_visibility,
        )
        self.show_angles: bool = cfg.overlay.show_angles

    # ====== 采集 ======

    @property
    def running(self) -> bool:
        return self.capture.is_running

    def start(self, on_frame: Optional[Callable[[np.ndarray], None]] = None) -> None:
        """启动（或重启）摄像头；on_frame 为每帧回调。失败时抛出 CaptureError。"""
        if on_frame is not None:
            self.capture.bind(on_frame)
        self.capture.start()

    def stop(self) -> None:
        self.capture.stop()

    # ====== 模式与选项 ======

    def set_hands_mode(self, enabled: bool) -> tuple[bool, bool]:
        """开关手部模式，返回 (hands_mode, holistic_mode)。"""
        self.modes.set_hands_mode(enabled)
        return self.modes.hands_mode, self.modes.holistic_mode

    def set_holistic_mode(self, enabled: bool) -> tuple[bool, bool]:
        """开关全身模式，返回 (hands_mode, holistic_mode)。"""
        self.modes.set_holistic_mode(enabled)
        return self.modes.hands_mode, self.modes.holistic_mode

    def set_show_angles(self, enabled: bool) -> None:
        self.show_angles = bool(enabled)

    # ====== 推理与绘制 ======

    def detect(self, frame: np.ndarray) -> FrameResult:
        """同步推理一帧；模式关闭时只返回原图。"""
        detector = self.modes.active_detector()
        if detector is None:
            return FrameResult(image=frame)
        return detector.detect(frame)

    def submit_frame(self, frame: np.ndarray) -> Optional["Future[FrameResult]"]:
        """异步推理一帧；已有任务在途或模式关闭时返回 None。"""
        return self.pipeline.submit(frame)

    def render(self, result: Optional[FrameResult]) -> np.ndarray:
        return self.renderer.render(result, show_angles=self.show_angles)

    def process_frame(self, frame: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """同步路径：推理 + 绘制，返回画布副本；frame 为 None 时返回 None。"""
        if frame is None:
            return None
        return self.render(self.detect(frame)).copy()

    def close(self) -> None:
        """停止采集、等待在途推理结束并释放检测器。"""
        self.capture.stop()
        self.pipeline.shutdown(wait=True)
        self.modes.close()
