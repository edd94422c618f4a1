from __future__ import annotations

from typing import Protocol

from PySide6.QtGui import QPixmap


class TrackingView(Protocol):
    """追踪视图接口：控制器通过该协议调用视图更新。"""
    def set_canvas_pixmap(self, pixmap: QPixmap) -> None:
        """更新画布。输入: QPixmap。输出: 无。"""
        ...

    def set_mode_checks(self, hands: bool, holistic: bool) -> None:
        """同步两个模式复选框的勾选状态。输入: 手部/全身是否开启。输出: 无。"""
        ...

    def set_running(self, running: bool) -> None:
        """按采集状态启用/禁用开始、停止按钮。"""
        ...

    def set_status(self, message: str, timeout_ms: int = 3000) -> None:
        """更新状态栏。输入: 文本与超时毫秒。输出: 无。作用: 提示进度/状态。"""
        ...

    def show_error(self, title: str, message: str) -> None:
        """显示错误弹窗。输入: 标题与内容。输出: 无。"""
        ...
