from __future__ import annotations

import logging
from concurrent.futures import Future
from functools import partial
from typing import Optional

import cv2
import numpy as np
from PySide6.QtCore import QObject, QTimer, Signal, Slot
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap

from tracking_core.capture import CaptureError
from tracking_core.session import TrackingSession
from tracking_core.types import CaptureMode, FrameResult

from .view_protocol import TrackingView

logger = logging.getLogger(__name__)


def _bgr_to_qpixmap(frame_bgr: np.ndarray, max_w: int, max_h: int) -> QPixmap:
    """BGR 帧转 QPixmap 并按最大尺寸等比缩放。

    输入: frame_bgr (h,w,3) BGR 图像；max_w/max_h 最大显示尺寸。
    输出: QPixmap。
    作用: 将 OpenCV 图像转换为可在 Qt 标签显示的位图。
    """
    h, w = frame_bgr.shape[:2]
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    qimg = QImage(rgb.data, w, h, rgb.strides[0], QImage.Format.Format_RGB888)
    pm = QPixmap.fromImage(qimg.copy())
    return pm.scaled(
        max_w,
        max_h,
        Qt.AspectRatioMode.KeepAspectRatio,
        Qt.TransformationMode.SmoothTransformation,
    )


class TrackingController(QObject):
    """控制器：承接UI事件，驱动会话；UI通过 TrackingView 接口更新。

    推理在后台线程执行，结果经 result_ready 信号回到 UI 线程绘制。
    """

    result_ready = Signal(int, object)  # (采集代次, FrameResult)
    inference_failed = Signal(int, str)

    def __init__(self, view: TrackingView, session: TrackingSession):
        """初始化控制器。

        输入: view 为实现 TrackingView 协议的视图对象；session 为本窗口的会话。
        输出: 无。
        作用: 准备帧轮询计时器并连接推理结果信号。
        """
        super().__init__()
        self._view = view
        self._session = session

        # QTimer 必须归属 UI 线程；parent 设为 controller 可保证线程归属一致
        self._timer = QTimer(self)
        self._timer.setInterval(session.config.frontend.tick_interval_ms)
        self._timer.timeout.connect(self._on_tick)

        self.result_ready.connect(self._on_result)
        self.inference_failed.connect(self._on_failed)

        self._display_w = session.config.overlay.width
        self._display_h = session.config.overlay.height
        # 每次 start/stop 加一；结果只在代次一致时绘制
        self._generation = 0

    @property
    def session(self) -> TrackingSession:
        return self._session

    def start(self) -> None:
        """打开摄像头并开始逐帧处理；已在运行时先停止旧的流。"""
        self._timer.stop()
        self._generation += 1
        try:
            self._session.start(on_frame=self._on_frame)
        except CaptureError as e:
            logger.error("摄像头启动失败: %s", e)
            self._view.set_running(False)
            self._view.show_error("打开失败", str(e))
            return
        self._timer.start()
        self._view.set_running(True)
        self._view.set_status("摄像头已开启", 2000)

    def stop(self) -> None:
        """停止采集。在途推理仍会完成，但其结果不再绘制。"""
        if self._timer.isActive():
            self._timer.stop()
        self._generation += 1
        self._session.stop()
        self._view.set_running(False)

    def set_hands_mode(self, enabled: bool) -> None:
        hands, holistic = self._session.set_hands_mode(enabled)
        self._view.set_mode_checks(hands, holistic)

    def set_holistic_mode(self, enabled: bool) -> None:
        hands, holistic = self._session.set_holistic_mode(enabled)
        self._view.set_mode_checks(hands, holistic)

    def set_show_angles(self, enabled: bool) -> None:
        self._session.set_show_angles(enabled)

    def _on_tick(self) -> None:
        """计时器回调：读取一帧；读取失败时自动停止。"""
        if not self._session.capture.poll():
            self.stop()
            self._view.set_status("摄像头读取结束/失败，已停止", 5000)

    def _on_frame(self, frame: np.ndarray) -> None:
        """帧回调：有模式时提交推理；无模式时直接显示原图。"""
        if self._session.modes.mode is CaptureMode.NONE:
            self._show(FrameResult(image=frame))
            return
        fut = self._session.submit_frame(frame)
        if fut is None:
            # 上一帧推理尚未完成，本帧丢弃
            return
        fut.add_done_callback(partial(self._deliver, self._generation))

    def _deliver(self, generation: int, fut: Future) -> None:
        # 可能在推理线程中调用，只做信号转发
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            self.inference_failed.emit(generation, str(exc))
            return
        self.result_ready.emit(generation, fut.result())

    @Slot(int, object)
    def _on_result(self, generation: int, result: object) -> None:
        """在 UI 线程绘制推理结果；采集已停止或已重新开始时跳过。"""
        if not isinstance(result, FrameResult):
            return
        if generation != self._generation or not self._session.running:
            return
        self._show(result)

    @Slot(int, str)
    def _on_failed(self, generation: int, msg: str) -> None:
        if generation != self._generation:
            return
        self._view.set_status(f"推理失败：{msg}", 5000)

    def _show(self, result: Optional[FrameResult]) -> None:
        canvas = self._session.render(result)
        self._view.set_canvas_pixmap(_bgr_to_qpixmap(canvas, self._display_w, self._display_h))

    def close(self) -> None:
        """关闭控制器：停止流程、等待在途推理、释放检测器。

        输入/输出: 无。
        作用: 应在窗口关闭时调用，确保无资源泄漏。
        """
        self.stop()
        self._session.close()
