from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QCheckBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from tracking_app.controller.tracking_controller import TrackingController
from tracking_core.config import AppConfig
from tracking_core.session import TrackingSession


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[AppConfig] = None):
        """初始化主窗口并构造会话与控制器。

        输入: config 应用配置，缺省为默认配置。
        作用: 设置窗口属性，创建控制器并搭建 UI 与事件绑定。
        """
        super().__init__()
        self.setWindowTitle("实时姿态/手部追踪（MediaPipe + PySide6）")
        self.resize(900, 640)

        cfg = config or AppConfig()
        self._controller = TrackingController(self, TrackingSession(cfg))

        self._build_ui(cfg)
        self._wire_events()
        self.set_running(False)

    def _build_ui(self, cfg: AppConfig) -> None:
        """构建界面控件与布局。"""
        root = QWidget(self)
        self.setCentralWidget(root)

        self.btn_start = QPushButton("开始")
        self.btn_stop = QPushButton("停止")
        self.chk_hands = QCheckBox("手部模式")
        self.chk_holistic = QCheckBox("全身模式")
        self.chk_angles = QCheckBox("显示角度")
        self.chk_angles.setChecked(cfg.overlay.show_angles)

        self.lbl_canvas = QLabel("画面预览")
        self.lbl_canvas.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.lbl_canvas.setMinimumSize(cfg.overlay.width, cfg.overlay.height)

        grp_controls = QGroupBox("操作")
        controls_layout = QHBoxLayout(grp_controls)
        controls_layout.addWidget(self.btn_start)
        controls_layout.addWidget(self.btn_stop)
        controls_layout.addSpacing(24)
        controls_layout.addWidget(self.chk_hands)
        controls_layout.addWidget(self.chk_holistic)
        controls_layout.addWidget(self.chk_angles)
        controls_layout.addStretch(1)

        layout = QVBoxLayout(root)
        layout.addWidget(grp_controls)
        layout.addWidget(self.lbl_canvas, 1)

        self._status = QStatusBar(self)
        self.setStatusBar(self._status)

    def _wire_events(self) -> None:
        """将控件事件连接到控制器。"""
        self.btn_start.clicked.connect(self._controller.start)
        self.btn_stop.clicked.connect(self._controller.stop)
        self.chk_hands.toggled.connect(self._controller.set_hands_mode)
        self.chk_holistic.toggled.connect(self._controller.set_holistic_mode)
        self.chk_angles.toggled.connect(self._controller.set_show_angles)

    # ====== 供控制器调用（视图接口） ======

    def set_canvas_pixmap(self, pixmap: QPixmap) -> None:
        """更新画布图片。输入: QPixmap。输出: 无。"""
        self.lbl_canvas.setPixmap(pixmap)

    def set_mode_checks(self, hands: bool, holistic: bool) -> None:
        """同步模式复选框；屏蔽信号避免再次触发切换。"""
        for chk, checked in ((self.chk_hands, hands), (self.chk_holistic, holistic)):
            if chk.isChecked() != checked:
                chk.blockSignals(True)
                chk.setChecked(checked)
                chk.blockSignals(False)

    def set_running(self, running: bool) -> None:
        self.btn_start.setText("重新开始" if running else "开始")
        self.btn_stop.setEnabled(running)

    def show_error(self, title: str, message: str) -> None:
        """弹出错误消息框。输入: 标题与内容。输出: 无。"""
        QMessageBox.critical(self, title, message)

    def set_status(self, message: str, timeout_ms: int = 3000) -> None:
        """更新状态栏消息。输入: 文本与超时毫秒。输出: 无。"""
        self.statusBar().showMessage(message, timeout_ms)

    def closeEvent(self, event) -> None:
        """窗口关闭钩子：释放控制器资源后再关闭。"""
        try:
            self._controller.close()
        finally:
            super().closeEvent(event)
