#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
RT Inspector - DICOM RT 文件元数据查看器
应用程序入口点

职责:
- 初始化 QApplication
- 加载全局配置（日志、设置）
- 创建并显示 MainWindow，可选打开命令行传入的文件
- 启动应用程序事件循环
"""

import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtWidgets import QApplication, QMessageBox

# 兼容直接 python main.py 运行
if __name__ == "__main__" and __package__ is None:
    sys.path.append(str(Path(__file__).parent.parent.resolve()))
    __package__ = "rtinspector"

from rtinspector.utils.logger import default_log_file, setup_logger, get_logger
from rtinspector.utils.settings import SettingsManager, get_settings_manager
from rtinspector.ui.main_window import MainWindow


class RTInspectorApplication:
    """应用程序类

    负责应用程序的初始化和生命周期管理
    """

    def __init__(self, app: QApplication, files: Optional[List[str]] = None) -> None:
        self.app = app
        self.files = files or []
        self.main_window: Optional[MainWindow] = None
        self.settings_manager: Optional[SettingsManager] = None
        self.log_file: Optional[Path] = None
        self.logger = None

    def initialize(self) -> bool:
        """初始化应用程序"""
        try:
            self.settings_manager = get_settings_manager()
            self.settings_manager.apply_defaults()

            # 日志级别来自设置，修改后立即生效
            self.log_file = default_log_file()
            self._setup_logging()
            self.settings_manager.setting_changed.connect(self._on_setting_changed)
            self.logger = get_logger(__name__)

            self.main_window = MainWindow(self.settings_manager)
            geometry = self.settings_manager.get_setting('main_window/geometry')
            if geometry:
                self.main_window.restoreGeometry(geometry)

            self.logger.info("应用程序初始化完成")
            return True

        except Exception as e:
            print(f"应用程序初始化过程中发生严重错误: {e}")
            QMessageBox.critical(None, "错误", f"应用程序初始化失败: {e}")
            return False

    def _setup_logging(self) -> None:
        setup_logger(
            log_file=self.log_file,
            level=self.settings_manager.get_setting('log_level', 'INFO'),
            console_output=True
        )

    def _on_setting_changed(self, key: str, value) -> None:
        if key == 'log_level':
            self._setup_logging()

    def run(self) -> int:
        """运行应用程序

        Returns:
            int: 应用程序退出代码
        """
        if self.main_window is None and not self.initialize():
            return 1

        self.main_window.show()
        if self.files:
            self.main_window.load_file(self.files[0])
        return self.app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    """应用程序主入口点"""
    argv = list(sys.argv if argv is None else argv)
    app = QApplication(argv)
    app.setOrganizationName("RTInspector Project")
    app.setApplicationName("RTInspector")
    app.setStyle('Fusion')

    inspector = RTInspectorApplication(app, argv[1:])
    if not inspector.initialize():
        return 1
    return inspector.run()


if __name__ == "__main__":
    sys.exit(main())
