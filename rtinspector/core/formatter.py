#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
值显示格式化
Turns resolved values into bounded, display-safe strings.

Two renderings are produced: rich text (escaped HTML) for the summary view
and plain text cells for the full tag table. Formatting never raises; any
failure becomes ERROR_MARKER.
"""

import html
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from rtinspector.core.element_table import PIXEL_DATA_KEY, ElementDescriptor, normalize_tag
from rtinspector.core.value_resolver import (
    Absent, FlattenedItem, RecordList, ResolvedValue, Scalar
)
from rtinspector.utils.logger import get_logger

logger = get_logger(__name__)

NOT_AVAILABLE_MARKER = '<span style="color: #999; font-style: italic;">Not available</span>'
EMPTY_SEQUENCE_MARKER = '<span style="color: #999; font-style: italic;">Empty sequence</span>'
ERROR_MARKER = "[Error reading value]"
UNREADABLE_MARKER = "[Unable to read value]"
ELLIPSIS = "..."

# 控制字符（不含 \t \n \v \f \r）
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0E-\x1F\x7F-\x9F]")

BINARY_VRS = ("OB", "OW", "OF", "OD", "OL", "OV")

# 序列条目字段在摘要视图中的简写
_SEQUENCE_FIELD_LABELS = (
    ("referenced_sop_instance_uid", "UID"),
    ("referenced_sop_class_uid", "Class"),
    ("frame_of_reference_uid", "FOR UID"),
)


@dataclass(frozen=True)
class DisplayLimits:
    """Truncation and binary detection thresholds."""
    value_limit: int = 100
    sequence_limit: int = 150
    binary_min_length: int = 50
    binary_ratio: float = 0.3

    @classmethod
    def from_settings(cls, settings_manager) -> "DisplayLimits":
        """从设置管理器读取显示限制，无效值使用默认值"""
        defaults = cls()
        try:
            return cls(
                value_limit=int(settings_manager.get_setting(
                    'display/value_limit', defaults.value_limit)),
                sequence_limit=int(settings_manager.get_setting(
                    'display/sequence_limit', defaults.sequence_limit)),
                binary_min_length=int(settings_manager.get_setting(
                    'display/binary_min_length', defaults.binary_min_length)),
                binary_ratio=float(settings_manager.get_setting(
                    'display/binary_ratio', defaults.binary_ratio)),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid display settings, using defaults: {e}")
            return defaults


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters plus an ellipsis when longer."""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def looks_binary(text: str, limits: DisplayLimits = DisplayLimits()) -> bool:
    """Guess whether decoded text is really binary data.

    Applies only to text longer than ``binary_min_length`` that contains
    control characters; it is binary when fewer than ``binary_ratio`` of the
    characters survive removing them.
    """
    if len(text) <= limits.binary_min_length or not CONTROL_CHARS.search(text):
        return False
    printable = CONTROL_CHARS.sub("", text)
    return len(printable) < len(text) * limits.binary_ratio


def binary_marker(byte_length: int) -> str:
    return f"[Binary/Encoded Data — {byte_length} bytes]"


class ValueFormatter:
    """Formats resolved values for the summary view and the tag table."""

    def __init__(self, limits: Optional[DisplayLimits] = None) -> None:
        self.limits = limits or DisplayLimits()
        # VR -> 表格单元格格式化函数
        self._table_strategies: Dict[str, Callable[[ElementDescriptor, ResolvedValue], str]] = {
            "SQ": self._format_sequence_cell,
            "UN": self._format_unknown_cell,
        }
        for vr in BINARY_VRS:
            self._table_strategies[vr] = self._format_binary_cell

    # ------------------------------------------------------------------
    # 标量
    # ------------------------------------------------------------------
    def format_scalar(self, value: Any, byte_length: Optional[int] = None) -> str:
        """Stringify a scalar, replace binary-looking text, truncate."""
        text = str(value)
        if looks_binary(text, self.limits):
            return binary_marker(len(text) if byte_length is None else byte_length)
        return truncate(text, self.limits.value_limit)

    # ------------------------------------------------------------------
    # 摘要视图（富文本）
    # ------------------------------------------------------------------
    def format_value(self, resolved: ResolvedValue, byte_length: Optional[int] = None) -> str:
        """Render a resolved value as escaped rich text for the summary view."""
        try:
            if resolved is None or isinstance(resolved, Absent):
                return NOT_AVAILABLE_MARKER
            if isinstance(resolved, RecordList):
                return self._format_record_list_html(resolved)
            if isinstance(resolved, Scalar):
                if isinstance(resolved.value, Mapping):
                    return self._format_record_html(resolved.value)
                return html.escape(self.format_scalar(resolved.value, byte_length))
            return html.escape(self.format_scalar(resolved, byte_length))
        except Exception as e:
            logger.error(f"Error formatting value: {e}", exc_info=True)
            return ERROR_MARKER

    def _format_record_list_html(self, records: RecordList) -> str:
        if not records.items:
            return EMPTY_SEQUENCE_MARKER

        # 可见文本总长度不超过 sequence_limit
        budget = self.limits.sequence_limit
        blocks = []
        for index, item in enumerate(records.items, start=1):
            if isinstance(item, FlattenedItem):
                fields = item.as_dict()
                if not fields:
                    blocks.append(f'<div class="sequence-item">{EMPTY_SEQUENCE_MARKER}</div>')
                    continue
                heading = f"Item {index}:"
                lines = [f"{key}: {self._field_text(value)}" for key, value in fields.items()]
            else:
                # 占位文本已包含条目序号
                heading = None
                lines = [str(item)]

            parts = []
            truncated = False
            for position, line in enumerate([heading] + lines if heading else lines):
                if len(line) > budget:
                    line = line[:budget] + ELLIPSIS
                    truncated = True
                budget -= min(len(line), budget)
                text = html.escape(line)
                parts.append(f"<b>{text}</b><br>" if heading and position == 0 else f"{text}<br>")
                if truncated:
                    break
            blocks.append(f'<div class="sequence-item">{"".join(parts)}</div>')
            if truncated:
                break
        return "".join(blocks)

    def _format_record_html(self, record: Mapping) -> str:
        lines = ['<div class="sequence-item">']
        for key, value in record.items():
            lines.append(
                f"<b>{html.escape(str(key))}:</b> {html.escape(self._field_text(value))}<br>")
        lines.append("</div>")
        return "".join(lines)

    def _field_text(self, value: Any) -> str:
        return truncate(str(value), self.limits.value_limit)

    # ------------------------------------------------------------------
    # 全部标签表格（纯文本）
    # ------------------------------------------------------------------
    def format_table_value(self, key: str, descriptor: ElementDescriptor,
                           resolved: ResolvedValue) -> str:
        """Plain-text cell for one element of the full tag table.

        Binary, unknown and pixel data elements always become a byte count
        marker and are never run through the binary heuristic.
        """
        try:
            strategy = self._table_strategies.get(descriptor.vr)
            if strategy is None and normalize_tag(key) == PIXEL_DATA_KEY:
                strategy = self._format_pixel_cell
            if strategy is None:
                strategy = self._format_scalar_cell
            return strategy(descriptor, resolved)
        except Exception as e:
            logger.error(f"Error formatting {key}: {e}", exc_info=True)
            return ERROR_MARKER

    def _format_sequence_cell(self, descriptor: ElementDescriptor, resolved: ResolvedValue) -> str:
        if not isinstance(resolved, RecordList) or not resolved.items:
            return f"[Sequence — {descriptor.item_count} items]"

        parts = []
        for index, item in enumerate(resolved.items, start=1):
            if isinstance(item, FlattenedItem):
                fields = [f"{label}: {getattr(item, attr)}"
                          for attr, label in _SEQUENCE_FIELD_LABELS if getattr(item, attr)]
                parts.append(f"Item {index}: " + ", ".join(fields) if fields else f"Item {index}")
            else:
                parts.append(str(item))
        return truncate("; ".join(parts), self.limits.sequence_limit)

    def _format_binary_cell(self, descriptor: ElementDescriptor, resolved: ResolvedValue) -> str:
        return f"[Binary Data — {descriptor.length} bytes]"

    def _format_unknown_cell(self, descriptor: ElementDescriptor, resolved: ResolvedValue) -> str:
        return f"[Unknown VR — {descriptor.length} bytes]"

    def _format_pixel_cell(self, descriptor: ElementDescriptor, resolved: ResolvedValue) -> str:
        return f"[Pixel Data — {descriptor.length} bytes]"

    def _format_scalar_cell(self, descriptor: ElementDescriptor, resolved: ResolvedValue) -> str:
        if isinstance(resolved, Scalar):
            if isinstance(resolved.value, Mapping):
                text = ", ".join(f"{k}: {v}" for k, v in resolved.value.items())
                return truncate(text, self.limits.value_limit)
            return self.format_scalar(resolved.value, descriptor.length)
        if isinstance(resolved, RecordList):
            # VR 声明不是 SQ 但解析出了条目
            return self._format_sequence_cell(descriptor, resolved)
        return UNREADABLE_MARKER
