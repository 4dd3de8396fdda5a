#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DICOM 标签面板，以表格形式显示文件中的全部标签。
"""
from PySide6.QtWidgets import QWidget, QVBoxLayout, QTreeWidget, QTreeWidgetItem
from typing import Iterable, Optional

from rtinspector.core.metadata_report import TableRow


class DicomTagPanel(QWidget):
    """
    “全部标签”页，按标签顺序显示 Tag / Name / Value 三列。
    """
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.tree_widget = QTreeWidget()
        self.tree_widget.setHeaderLabels([self.tr("Tag"), self.tr("Name"), self.tr("Value")])
        self.tree_widget.setColumnWidth(0, 120)
        self.tree_widget.setColumnWidth(1, 260)
        self.tree_widget.setRootIsDecorated(False)
        self.tree_widget.setAlternatingRowColors(True)
        self.tree_widget.header().setStretchLastSection(True)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.tree_widget)
        self.setLayout(layout)

    def update_rows(self, rows: Optional[Iterable[TableRow]]) -> None:
        """
        使用新的表格行更新标签列表。

        Args:
            rows: build_table_rows 生成的行，如果为 None 则清空列表。
        """
        self.tree_widget.clear()
        if rows is None:
            return

        # 行已按标签排序，保持原顺序
        for row in rows:
            item = QTreeWidgetItem(self.tree_widget, [row.tag_label, row.name, row.value])
            item.setToolTip(2, row.value)

    def row_count(self) -> int:
        return self.tree_widget.topLevelItemCount()

    def clear(self) -> None:
        """
        清空树形控件。
        """
        self.tree_widget.clear()
