#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
元素值解析
Resolves the logical value of an element.

Scalars are read with the structured (pydicom) reader first and fall back to
decoding the raw bytes. Sequences are flattened into a few cross-reference
UIDs per item. None of the functions here raise: failures degrade to the
raw decoder, then to ``ABSENT``.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from rtinspector.core.element_table import (
    UNDEFINED_LENGTH, ElementDescriptor, ElementTable, find_element
)
from rtinspector.utils.logger import get_logger

logger = get_logger(__name__)

RAW_TEXT_ENCODING = "latin-1"
PLACEHOLDER_TEMPLATE = "Item {index} — no readable fields"


class Absent:
    """Value not present or not readable."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


@dataclass(frozen=True)
class Scalar:
    """A single value: a string, a number or a mapping of named fields."""
    value: Any


@dataclass(frozen=True)
class FlattenedItem:
    """UIDs extracted from one sequence item."""
    referenced_sop_instance_uid: Optional[str] = None
    referenced_sop_class_uid: Optional[str] = None
    frame_of_reference_uid: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> Dict[str, str]:
        """Non-empty fields keyed by their DICOM keyword."""
        result = {}
        for attr, keyword in _ITEM_KEYWORDS.items():
            value = getattr(self, attr)
            if value:
                result[keyword] = value
        return result


@dataclass(frozen=True)
class RecordList:
    """Flattened sequence; placeholders keep the item positions."""
    items: Tuple[Union[FlattenedItem, str], ...]

    def __len__(self) -> int:
        return len(self.items)


ResolvedValue = Union[Absent, Scalar, RecordList]

_ITEM_KEYWORDS = {
    "referenced_sop_instance_uid": "ReferencedSOPInstanceUID",
    "referenced_sop_class_uid": "ReferencedSOPClassUID",
    "frame_of_reference_uid": "FrameOfReferenceUID",
}

# 每个字段按优先级排列的候选标签
SEQUENCE_ITEM_FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    # (300C,0006) 用于 Referenced RT Plan / Structure Set 序列
    ("referenced_sop_instance_uid", ("x300C0006", "x00081155")),
    ("referenced_sop_class_uid", ("x00081150",)),
    ("frame_of_reference_uid", ("x00200052",)),
)


def decode_raw_value(table: Optional[ElementTable],
                     descriptor: Optional[ElementDescriptor]) -> Optional[str]:
    """Decode an element's raw byte span as latin-1 text.

    The declared VR is ignored on purpose: malformed files often carry a
    wrong VR. NUL bytes and surrounding whitespace are removed.

    Returns:
        Optional[str]: the text, or None if there is nothing to decode
    """
    if table is None or descriptor is None:
        return None
    length = descriptor.length
    offset = descriptor.data_offset
    if not length or length <= 0 or length == UNDEFINED_LENGTH or offset is None:
        return None
    buffer = table.byte_array
    if not buffer:
        return None

    try:
        chunk = bytes(buffer[offset:offset + length])
        decoded = chunk.decode(RAW_TEXT_ENCODING).replace("\0", "").strip()
    except Exception as e:
        logger.warning(f"Error reading raw value of {descriptor.tag}: {e}")
        return None
    return decoded if decoded else None


def _displayable(value: Any) -> Any:
    """将 pydicom 的值类型转换为可显示的 Python 值"""
    if value is None or isinstance(value, (str, Mapping)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        # 字节数据交给原始解码器处理
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (list, tuple)) or type(value).__name__ == "MultiValue":
        parts = [str(part) for part in map(_displayable, value) if part is not None]
        return "\\".join(parts)
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        # pydicom IS 值是 int 的子类
        return int(value)
    # PersonName, UID, DSfloat 等
    return str(value)


def read_structured_value(descriptor: ElementDescriptor) -> Any:
    """Structured read of an element; may raise."""
    if descriptor.reader is not None:
        return descriptor.reader()
    return descriptor.value


def _read_text(table: ElementTable, descriptor: ElementDescriptor) -> Optional[Any]:
    """Structured read with raw fallback, used for scalars and item fields."""
    try:
        value = _displayable(read_structured_value(descriptor))
    except Exception as e:
        logger.debug(f"Structured read of {descriptor.tag} failed ({e}), reading raw bytes")
        return decode_raw_value(table, descriptor)

    if value is None:
        return decode_raw_value(table, descriptor)
    if isinstance(value, str):
        value = value.strip()
        return value if value else None
    return value


def flatten_sequence(descriptor: ElementDescriptor) -> Optional[List[Union[FlattenedItem, str]]]:
    """Extract the referenced UIDs from every item of a sequence.

    Each field is read on its own, so one unreadable nested element does not
    hide the others. Items without any readable field become a placeholder
    string, keeping one entry per source item.

    Returns:
        Optional[list]: one entry per item, or None if the sequence is empty
    """
    if not descriptor.items:
        return None

    flattened: List[Union[FlattenedItem, str]] = []
    for index, item in enumerate(descriptor.items, start=1):
        found: Dict[str, str] = {}
        if item is not None:
            for attr, candidates in SEQUENCE_ITEM_FIELDS:
                for key in candidates:
                    element = find_element(item, key)
                    if element is None:
                        continue
                    text = _read_text(item, element)
                    if text is not None and text != "":
                        found[attr] = str(text)
                        break

        record = FlattenedItem(**found)
        if record.is_empty():
            flattened.append(PLACEHOLDER_TEMPLATE.format(index=index))
        else:
            flattened.append(record)
    return flattened


def resolve_element(table: Optional[ElementTable],
                    descriptor: Optional[ElementDescriptor]) -> ResolvedValue:
    """Resolve the logical value of an element.

    Args:
        table: the table the element belongs to (provides the byte buffer)
        descriptor: the element, or None for a lookup miss

    Returns:
        ResolvedValue: ABSENT, a Scalar or a RecordList
    """
    if descriptor is None:
        return ABSENT

    try:
        if descriptor.is_sequence:
            items = flatten_sequence(descriptor)
            return RecordList(tuple(items)) if items else ABSENT

        value = _read_text(table, descriptor)
        return ABSENT if value is None else Scalar(value)
    except Exception as e:
        logger.error(f"Error reading tag {descriptor.tag}: {e}", exc_info=True)
        return ABSENT


def resolve_tag(table: Optional[ElementTable], tag: str) -> ResolvedValue:
    """Normalize ``tag``, locate it in ``table`` and resolve its value."""
    return resolve_element(table, find_element(table, tag))


def scalar_text(resolved: ResolvedValue) -> Optional[str]:
    """Return a Scalar's value as text, or None for anything else."""
    if isinstance(resolved, Scalar) and not isinstance(resolved.value, Mapping):
        return str(resolved.value)
    return None
