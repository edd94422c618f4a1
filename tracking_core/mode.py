from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from .detectors import LandmarkDetector
from .types import CaptureMode

logger = logging.getLogger(__name__)

DetectorFactory = Callable[[], LandmarkDetector]


class ModeController:
    """两种互斥采集模式（手部 / 全身）的切换。

    两者可同时关闭，但绝不同时开启；开启其一即关闭另一个。
    切换只影响之后送入的帧。检测器在首次用到时才创建。
    """

    def __init__(self, factories: Optional[Mapping[CaptureMode, DetectorFactory]] = None,
                 initial: CaptureMode = CaptureMode.NONE):
        self._factories: dict[CaptureMode, DetectorFactory] = dict(factories or {})
        self._detectors: dict[CaptureMode, LandmarkDetector] = {}
        self._mode = initial

    @property
    def mode(self) -> CaptureMode:
        return self._mode

    @property
    def hands_mode(self) -> bool:
        return self._mode is CaptureMode.HANDS

    @property
    def holistic_mode(self) -> bool:
        return self._mode is CaptureMode.HOLISTIC

    def set_hands_mode(self, enabled: bool) -> CaptureMode:
        return self._toggle(CaptureMode.HANDS, enabled)

    def set_holistic_mode(self, enabled: bool) -> CaptureMode:
        return self._toggle(CaptureMode.HOLISTIC, enabled)

    def _toggle(self, mode: CaptureMode, enabled: bool) -> CaptureMode:
        if enabled:
            new_mode = mode
        elif self._mode is mode:
            new_mode = CaptureMode.NONE
        else:
            # 关闭一个本来就未开启的模式：不影响当前模式
            new_mode = self._mode
        if new_mode is not self._mode:
            logger.info("采集模式切换: %s -> %s", self._mode.value, new_mode.value)
            self._mode = new_mode
        return self._mode

    def detector_for(self, mode: CaptureMode) -> Optional[LandmarkDetector]:
        """取（必要时创建）指定模式的检测器；未注册该模式时返回 None。"""
        if mode is CaptureMode.NONE:
            return None
        det = self._detectors.get(mode)
        if det is None:
            factory = self._factories.get(mode)
            if factory is None:
                return None
            det = factory()
            self._detectors[mode] = det
        return det

    def active_detector(self) -> Optional[LandmarkDetector]:
        """返回当前模式对应的检测器；模式关闭时为 None。"""
        return self.detector_for(self._mode)

    def close(self) -> None:
        """释放已创建的检测器。"""
        for det in self._detectors.values():
            det.close()
        self._detectors.clear()
