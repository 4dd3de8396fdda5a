#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
RT Inspector 主程序窗口
包含标签页布局、菜单栏、拖放打开文件和状态栏
"""
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QTabWidget, QLabel, QStatusBar,
    QFileDialog, QMessageBox
)
from PySide6.QtGui import QAction, QKeySequence
from typing import Dict, Optional
from pathlib import Path

from rtinspector.core.dataset_reader import DicomReadError, is_supported_file
from rtinspector.core.formatter import DisplayLimits, ValueFormatter
from rtinspector.core.metadata_report import SUMMARY_GROUPS, InspectionReport, inspect_file
from rtinspector.core.tag_dictionary import default_name_resolver
from rtinspector.ui.panels.dicom_tag_panel import DicomTagPanel
from rtinspector.ui.panels.summary_panel import SummaryPanel
from rtinspector.utils.logger import get_logger
from rtinspector.utils.settings import SettingsManager, get_settings_manager


class MainWindow(QMainWindow):
    """应用程序主窗口"""

    def __init__(self, settings_manager: Optional[SettingsManager] = None,
                 parent: Optional[QWidget] = None) -> None:
        """初始化主窗口"""
        super().__init__(parent)
        self.logger = get_logger(__name__)
        self.settings_manager = settings_manager or get_settings_manager()
        self.name_resolver = default_name_resolver()
        self.formatter = ValueFormatter(DisplayLimits.from_settings(self.settings_manager))
        self.settings_manager.setting_changed.connect(self._on_setting_changed)

        # 当前文件的报告，切换文件或清空时丢弃
        self.report: Optional[InspectionReport] = None

        self._init_ui()
        self._update_ui_state()

    def _init_ui(self) -> None:
        """初始化用户界面"""
        self.setGeometry(100, 100, 1100, 760)
        self.setWindowTitle(self.tr("RT Inspector - DICOM RT 元数据查看器"))
        self.setAcceptDrops(True)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        self.drop_hint = QLabel(self.tr("将 DICOM 文件 (.dcm / .dicom) 拖放到此处，或使用 文件 > 打开"))
        main_layout.addWidget(self.drop_hint)

        self.tab_widget = QTabWidget()
        main_layout.addWidget(self.tab_widget)

        # 每个摘要分组一个标签页
        self.summary_panels: Dict[str, SummaryPanel] = {}
        for group in SUMMARY_GROUPS:
            panel = SummaryPanel()
            self.summary_panels[group.name] = panel
            self.tab_widget.addTab(panel, self.tr(group.title))

        self.dicom_tag_panel = DicomTagPanel()
        self.tab_widget.addTab(self.dicom_tag_panel, self.tr("All Tags"))

        self._init_menus()
        self._init_statusbar()

    def _init_menus(self) -> None:
        """初始化菜单栏"""
        file_menu = self.menuBar().addMenu(self.tr("文件(&F)"))

        self.open_action = QAction(self.tr("打开DICOM文件(&O)"), self)
        self.open_action.setShortcut(QKeySequence.Open)
        self.open_action.triggered.connect(self._open_file_dialog)
        file_menu.addAction(self.open_action)

        self.clear_action = QAction(self.tr("清空(&C)"), self)
        self.clear_action.triggered.connect(self.clear)
        file_menu.addAction(self.clear_action)

        file_menu.addSeparator()

        exit_action = QAction(self.tr("退出(&X)"), self)
        exit_action.setShortcut(QKeySequence.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

    def _init_statusbar(self) -> None:
        """初始化状态栏"""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.status_label = QLabel(self.tr("就绪"))
        self.status_bar.addWidget(self.status_label)

        self.file_info_label = QLabel()
        self.status_bar.addPermanentWidget(self.file_info_label)

    def _update_ui_state(self) -> None:
        """根据是否加载了文件更新控件状态"""
        has_report = self.report is not None
        self.clear_action.setEnabled(has_report)
        self.tab_widget.setEnabled(has_report)
        self.drop_hint.setVisible(not has_report)
        if has_report:
            self.file_info_label.setText(
                f"{self.report.file_name} ({self.report.file_size_text})")
        else:
            self.file_info_label.clear()

    def _on_setting_changed(self, key: str, value) -> None:
        """显示限制变化时重建格式化器，下次加载文件时生效"""
        if key.startswith('display/'):
            self.formatter = ValueFormatter(DisplayLimits.from_settings(self.settings_manager))

    def _open_file_dialog(self) -> None:
        """打开文件对话框选择 DICOM 文件"""
        start_dir = self.settings_manager.get_setting('last_directory', '')
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            self.tr("打开DICOM文件"),
            str(start_dir or ''),
            self.tr("DICOM文件 (*.dcm *.dicom);;所有文件 (*)")
        )
        if file_path:
            self.settings_manager.set_setting('last_directory', str(Path(file_path).parent))
            self.load_file(file_path)

    def load_file(self, file_path) -> bool:
        """加载并显示一个 DICOM 文件

        Returns:
            bool: 是否加载成功
        """
        file_path = Path(file_path)
        if not is_supported_file(file_path):
            self._show_error(self.tr("Please select a DICOM file (.dcm or .dicom)"))
            return False

        self.logger.info(f"正在加载DICOM文件: {file_path}")
        self.status_label.setText(self.tr("正在加载..."))
        try:
            report = inspect_file(file_path, self.name_resolver, self.formatter)
        except DicomReadError as e:
            self.logger.error(f"加载文件失败: {file_path}. 错误: {e}")
            self._show_error(self.tr(
                "Error reading DICOM file: {0}. Please ensure the file is a valid DICOM file."
            ).format(e))
            return False

        self.show_report(report)
        self.status_label.setText(self.tr("DICOM文件加载成功"))
        return True

    def show_report(self, report: InspectionReport) -> None:
        """用新的报告替换当前显示"""
        self.report = report
        for name, panel in self.summary_panels.items():
            panel.update_section(report.summary.get(name))
        self.dicom_tag_panel.update_rows(report.rows)
        self._update_ui_state()

    def clear(self) -> None:
        """清空当前文件并回到第一个标签页"""
        self.report = None
        for panel in self.summary_panels.values():
            panel.clear()
        self.dicom_tag_panel.clear()
        self.tab_widget.setCurrentIndex(0)
        self.status_label.setText(self.tr("就绪"))
        self._update_ui_state()

    def _show_error(self, message: str) -> None:
        self.status_label.setText(message)
        QMessageBox.critical(self, self.tr("错误"), message)

    def dragEnterEvent(self, event) -> None:
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event) -> None:
        urls = event.mimeData().urls()
        if not urls:
            event.ignore()
            return
        # 只处理第一个文件
        event.acceptProposedAction()
        self.load_file(urls[0].toLocalFile())

    def closeEvent(self, event) -> None:
        """重写关闭事件，保存窗口状态"""
        self.settings_manager.set_setting('main_window/geometry', self.saveGeometry())
        self.settings_manager.save_settings()
        super().closeEvent(event)
