from __future__ import annotations

import os
import threading
import time

import pytest

pytest.importorskip("PySide6")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from tracking_app.controller.tracking_controller import TrackingController  # noqa: E402
from tracking_core.capture import CaptureError  # noqa: E402
from tracking_core.config import AppConfig, OverlayConfig  # noqa: E402
from tracking_core.session import TrackingSession  # noqa: E402
from tracking_core.types import CaptureMode, FrameResult  # noqa: E402

from conftest import FakeCamera, FakeDetector, wait_until  # noqa: E402


class RecordingView:
    def __init__(self):
        self.pixmaps = []
        self.checks = []
        self.running = []
        self.errors = []
        self.statuses = []

    def set_canvas_pixmap(self, pixmap):
        self.pixmaps.append(pixmap)

    def set_mode_checks(self, hands, holistic):
        self.checks.append((hands, holistic))

    def set_running(self, running):
        self.running.append(running)

    def set_status(self, message, timeout_ms=3000):
        self.statuses.append(message)

    def show_error(self, title, message):
        self.errors.append((title, message))


@pytest.fixture(scope="module")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def _make(source_factory=None, hands_factory=None):
    session = TrackingSession(
        AppConfig(overlay=OverlayConfig(width=64, height=48)),
        detector_factories={
            CaptureMode.HANDS: hands_factory or (lambda: FakeDetector(CaptureMode.HANDS)),
            CaptureMode.HOLISTIC: lambda: FakeDetector(CaptureMode.HOLISTIC),
        },
        source_factory=source_factory or (lambda: FakeCamera(frames=5)),
    )
    view = RecordingView()
    return TrackingController(view, session), view


def test_mode_changes_are_mirrored_to_view(qapp):
    ctl, view = _make()
    ctl.set_holistic_mode(True)
    ctl.set_hands_mode(True)
    assert view.checks == [(False, True), (True, False)]
    ctl.close()


def test_camera_failure_is_reported(qapp):
    def broken():
        raise CaptureError("无法打开摄像头 0")

    ctl, view = _make(broken)
    ctl.start()
    assert view.errors and "无法打开摄像头" in view.errors[0][1]
    assert view.running[-1] is False
    ctl.close()


def test_frame_without_mode_is_shown_directly(qapp):
    ctl, view = _make()
    ctl.start()
    ctl._on_tick()
    assert len(view.pixmaps) == 1
    ctl.close()


def test_result_after_stop_is_skipped(qapp, frame):
    ctl, view = _make()
    ctl.start()
    ctl.stop()
    ctl._on_result(0, FrameResult(image=frame, mode=CaptureMode.HANDS))
    assert view.pixmaps == []
    ctl.close()


def _pump(qapp, pred, timeout=2.0):
    """处理 Qt 事件直到 pred 成立或超时。"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        qapp.processEvents()
        if pred():
            return True
        time.sleep(0.005)
    return pred()


def test_inference_result_reaches_view(qapp):
    ctl, view = _make()
    ctl.set_hands_mode(True)
    ctl.start()
    ctl._on_tick()
    assert _pump(qapp, lambda: len(view.pixmaps) > 0)
    ctl.close()


def test_inference_failure_sets_status(qapp):
    def boom(_frame):
        raise RuntimeError("模型崩溃")

    ctl, view = _make(hands_factory=lambda: FakeDetector(CaptureMode.HANDS, result_factory=boom))
    ctl.set_hands_mode(True)
    ctl.start()
    ctl._on_tick()
    assert _pump(qapp, lambda: any("推理失败" in s for s in view.statuses))
    assert any("模型崩溃" in s for s in view.statuses)
    assert view.pixmaps == []
    ctl.close()


def test_result_from_previous_start_is_not_drawn(qapp):
    gate = threading.Event()
    ctl, view = _make(hands_factory=lambda: FakeDetector(CaptureMode.HANDS, gate=gate))
    delivered = []
    ctl.result_ready.connect(lambda gen, result: delivered.append(gen))

    ctl.set_hands_mode(True)
    ctl.start()
    ctl._on_tick()
    assert ctl.session.pipeline.busy

    # 推理还在进行时停止再开始
    ctl.stop()
    ctl.start()
    ctl._timer.stop()
    gate.set()

    assert wait_until(lambda: delivered)
    for _ in range(5):
        qapp.processEvents()
    assert view.pixmaps == []
    ctl.close()
