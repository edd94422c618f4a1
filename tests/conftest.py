from __future__ import annotations

import threading
import time
from typing import Callable, Optional

import numpy as np
import pytest

from tracking_core.capture import CameraSource
from tracking_core.detectors import LandmarkDetector
from tracking_core.types import CaptureMode, FrameResult, Landmark


class FakeDetector(LandmarkDetector):
    """按预设结果返回的检测器；可选地阻塞到 gate 被放行。"""

    def __init__(self, mode: CaptureMode, result_factory: Optional[Callable[[np.ndarray], FrameResult]] = None,
                 gate: Optional[threading.Event] = None):
        self.mode = mode
        self._factory = result_factory
        self._gate = gate
        self.calls = 0
        self.closed = False

    def name(self) -> str:
        return f"fake_{self.mode.value}"

    def detect(self, frame_bgr: np.ndarray) -> FrameResult:
        self.calls += 1
        if self._gate is not None:
            self._gate.wait(timeout=5)
        if self._factory is not None:
            return self._factory(frame_bgr)
        return FrameResult(image=frame_bgr, mode=self.mode)

    def close(self) -> None:
        self.closed = True


class FakeCamera(CameraSource):
    def __init__(self, frames: int = 3, shape=(48, 64, 3)):
        self._remaining = frames
        self._shape = shape
        self.released = False

    def read(self):
        if self.released or self._remaining <= 0:
            return False, None
        self._remaining -= 1
        return True, np.full(self._shape, 100, dtype=np.uint8)

    def release(self) -> None:
        self.released = True


def make_pose(points: dict[int, tuple[float, float, float]], visibility: Optional[float] = None,
              size: int = 33) -> list[Optional[Landmark]]:
    """只填充给定索引的 33 点身体关键点列表，其余为 None。"""
    out: list[Optional[Landmark]] = [None] * size
    for idx, (x, y, z) in points.items():
        out[idx] = Landmark(x, y, z, visibility)
    return out


def full_pose(x: float = 0.5, y: float = 0.5) -> list[Optional[Landmark]]:
    """33 个点全部存在的身体关键点（手臂、腿各成直角）。"""
    pts = {i: (x, y, 0.0) for i in range(33)}
    pts.update({
        11: (0.4, 0.3, 0.0), 13: (0.4, 0.5, 0.0), 15: (0.6, 0.5, 0.0),
        12: (0.6, 0.3, 0.0), 14: (0.6, 0.5, 0.0), 16: (0.6, 0.7, 0.0),
        23: (0.4, 0.6, 0.0), 25: (0.4, 0.8, 0.0), 27: (0.4, 0.9, 0.0),
        24: (0.6, 0.6, 0.0), 26: (0.6, 0.8, 0.0), 28: (0.6, 0.9, 0.0),
    })
    return make_pose(pts)


def wait_until(pred: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if pred():
            return True
        time.sleep(0.005)
    return pred()


@pytest.fixture
def frame() -> np.ndarray:
    return np.full((48, 64, 3), 100, dtype=np.uint8)
