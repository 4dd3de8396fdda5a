#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
摘要面板，显示一个元数据分组（通用 / RT Plan / RT Dose / RT Structure）。
"""
import html
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget

from rtinspector.core.metadata_report import SummaryEntry, SummarySection


class SummaryPanel(QScrollArea):
    """按“标签名 / 值 / Tag”块显示分组中的每个条目"""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWidgetResizable(True)

        self._container = QWidget()
        self._layout = QVBoxLayout(self._container)
        self._layout.setAlignment(Qt.AlignTop)
        self.setWidget(self._container)

        self._items: List[QFrame] = []
        self.empty_label = QLabel()
        self.empty_label.setObjectName("emptyMessage")
        self.empty_label.setWordWrap(True)
        self._layout.addWidget(self.empty_label)
        self.empty_label.hide()

    def update_section(self, section: Optional[SummarySection]) -> None:
        """用新的分组内容替换当前显示"""
        self.clear()
        if section is None:
            return

        if section.empty_message:
            self.empty_label.setText(section.empty_message)
            self.empty_label.show()
            return

        for entry in section.entries:
            frame = self._create_item(entry)
            self._layout.addWidget(frame)
            self._items.append(frame)

    def _create_item(self, entry: SummaryEntry) -> QFrame:
        frame = QFrame()
        frame.setObjectName("metadataItem")
        frame.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(frame)

        label = QLabel(f"<b>{html.escape(entry.label)}</b>")
        value = QLabel(entry.display)
        # display 已经过转义，可以按富文本显示
        value.setTextFormat(Qt.RichText)
        value.setWordWrap(True)
        value.setTextInteractionFlags(Qt.TextSelectableByMouse)
        tag = QLabel(self.tr("Tag: {0}").format(entry.tag_label))
        tag.setStyleSheet("color: #888;")

        layout.addWidget(label)
        layout.addWidget(value)
        layout.addWidget(tag)
        return frame

    def item_count(self) -> int:
        return len(self._items)

    def empty_message(self) -> str:
        return self.empty_label.text() if not self.empty_label.isHidden() else ''

    def clear(self) -> None:
        for frame in self._items:
            self._layout.removeWidget(frame)
            frame.deleteLater()
        self._items = []
        self.empty_label.clear()
        self.empty_label.hide()
