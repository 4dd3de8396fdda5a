#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
使用 pydicom 将 DICOM 文件解析为元素表
Builds an ElementTable from the bytes of a DICOM file.

pydicom keeps elements as raw, unconverted entries until they are accessed.
The adapter reads those raw entries to get each element's VR, length and
value offset in the file, and defers the structured conversion to the
descriptor's ``reader`` so a bad element only fails when it is read.
"""

import functools
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pydicom
from pydicom.datadict import dictionary_VR
from pydicom.dataset import Dataset

from rtinspector.core.element_table import (
    KEY_MARKER, UNDEFINED_LENGTH, ElementDescriptor, ElementTable
)
from rtinspector.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_SUFFIXES = ('.dcm', '.dicom')


class DicomReadError(Exception):
    """The file could not be parsed as DICOM."""


def is_supported_file(file_path: Union[str, Path]) -> bool:
    """Check the file name for a DICOM extension."""
    return Path(file_path).suffix.lower() in SUPPORTED_SUFFIXES


def tag_key(tag: int) -> str:
    """``0x00100020`` -> ``x00100020``"""
    return f"{KEY_MARKER}{int(tag):08X}"


def _read_value(dataset: Dataset, tag: int) -> Any:
    # 访问元素时 pydicom 才会进行值转换
    return dataset[tag].value


def _element_vr(tag: int, element: Any) -> str:
    vr = getattr(element, 'VR', None)
    if vr:
        return str(vr)
    # 隐式 VR 文件的原始元素不带 VR
    try:
        return dictionary_VR(tag)
    except KeyError:
        return 'UN'


def _element_length(element: Any) -> int:
    if getattr(element, 'is_raw', False):
        length = element.length
        if length == UNDEFINED_LENGTH:
            return len(element.value) if element.value is not None else 0
        return length

    value = getattr(element, 'value', None)
    if isinstance(value, (bytes, bytearray, str)):
        return len(value)
    return 0


def _element_offset(element: Any, byte_array: bytes, base: int) -> Optional[int]:
    if not getattr(element, 'is_raw', False):
        return getattr(element, 'file_tell', None)

    value = element.value
    if value is None:
        return element.value_tell
    # 序列条目中的位置可能相对于序列值的起点
    candidates = [element.value_tell]
    if base:
        candidates.append(base + element.value_tell)
    for offset in candidates:
        if byte_array[offset:offset + len(value)] == value:
            return offset
    return None


def _describe(dataset: Dataset, tag: int, byte_array: bytes, base: int) -> ElementDescriptor:
    element = dataset.get_item(tag)
    vr = _element_vr(tag, element)
    offset = _element_offset(element, byte_array, base)
    items = None

    if vr == 'SQ':
        try:
            sequence = dataset[tag].value or []
            items = tuple(_build_table(item, byte_array, offset or base) for item in sequence)
        except Exception as e:
            logger.warning(f"Could not read sequence {tag_key(tag)}: {e}")
            items = ()

    return ElementDescriptor(
        tag=tag_key(tag),
        vr=vr,
        length=_element_length(element),
        data_offset=offset,
        items=items,
        reader=functools.partial(_read_value, dataset, tag),
    )


def _build_table(dataset: Dataset, byte_array: bytes, base: int = 0) -> ElementTable:
    elements: Dict[str, ElementDescriptor] = {}
    for tag in list(dataset.keys()):
        try:
            descriptor = _describe(dataset, tag, byte_array, base)
        except Exception as e:
            logger.warning(f"Skipping unreadable element {tag_key(tag)}: {e}")
            continue
        elements[descriptor.tag] = descriptor
    return ElementTable(elements, byte_array)


def read_element_table(data: bytes) -> ElementTable:
    """Parse DICOM bytes into an ElementTable.

    Args:
        data: complete file contents

    Returns:
        ElementTable: top level elements including the file meta group

    Raises:
        DicomReadError: the bytes are not a readable DICOM file
    """
    try:
        dataset = pydicom.dcmread(BytesIO(data), force=True)
    except Exception as e:
        raise DicomReadError(f"Failed to parse DICOM file: {e}") from e

    byte_array = bytes(data)
    elements: Dict[str, ElementDescriptor] = {}

    file_meta = getattr(dataset, 'file_meta', None)
    if file_meta is not None:
        elements.update(_build_table(file_meta, byte_array).elements)
    elements.update(_build_table(dataset, byte_array).elements)

    if not elements:
        raise DicomReadError(
            "Failed to parse DICOM file. The file may not be a valid DICOM file.")

    logger.info(f"DICOM file parsed successfully. Number of elements: {len(elements)}")
    return ElementTable(elements, byte_array)


def read_element_table_from_file(file_path: Union[str, Path]) -> ElementTable:
    """Read a file from disk and parse it with read_element_table."""
    try:
        data = Path(file_path).read_bytes()
    except OSError as e:
        raise DicomReadError(f"Error reading file: {e}") from e
    return read_element_table(data)
