from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from tracking_app.ui.main_window import MainWindow
from tracking_core.config import load_config
from tracking_core.log import setup_logging


def main() -> int:
    """应用入口：读取配置、创建 QApplication 与主窗口并运行事件循环。

    输入/输出: 无显式输入；返回应用退出码（int）。
    """
    config = load_config()
    setup_logging(config.log_level)

    app = QApplication(sys.argv)
    app.setApplicationName("姿态追踪可视化")
    w = MainWindow(config)
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
