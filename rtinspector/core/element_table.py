#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
元素表数据模型
Element table, tag normalization and element lookup.

An ElementTable is the flat ``key -> ElementDescriptor`` collection that the
parser adapter builds for one input file. Keys use the ``x`` marker followed
by the 8 hex digits of the tag (``x00100020``). Tables are read-only once
built; every helper here only reads them.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

KEY_MARKER = "x"
PIXEL_DATA_KEY = "x7FE00010"
UNDEFINED_LENGTH = 0xFFFFFFFF

# 允许出现在标签中的分隔符
_SEPARATORS = re.compile(r"[\s\-,()]")


@dataclass(frozen=True)
class ElementDescriptor:
    """Metadata and value access for one element of an ElementTable.

    Attributes:
        tag: normalized key of the element (``x00100020``)
        vr: two letter value representation code
        length: byte length of the encoded value
        data_offset: offset of the value inside the table's byte buffer
        value: precomputed structured value, if the parser produced one
        items: nested item tables, sequences only
        name: label supplied by the parser, if any
        reader: deferred structured read, may raise
    """
    tag: str
    vr: str
    length: int = 0
    data_offset: Optional[int] = None
    value: Any = None
    items: Optional[Tuple["ElementTable", ...]] = None
    name: Optional[str] = None
    reader: Optional[Callable[[], Any]] = None

    @property
    def is_sequence(self) -> bool:
        return self.vr == "SQ"

    @property
    def item_count(self) -> int:
        return len(self.items) if self.items else 0


class ElementTable:
    """Read-only ``key -> ElementDescriptor`` mapping plus the shared byte buffer."""

    def __init__(self,
                 elements: Optional[Mapping[str, ElementDescriptor]] = None,
                 byte_array: bytes = b"") -> None:
        self._elements = MappingProxyType(dict(elements or {}))
        self.byte_array = byte_array

    @property
    def elements(self) -> Mapping[str, ElementDescriptor]:
        return self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[str]:
        return iter(self._elements)

    def __contains__(self, key: object) -> bool:
        return key in self._elements

    def __repr__(self) -> str:
        return f"ElementTable({len(self._elements)} elements, {len(self.byte_array)} bytes)"

    def sorted_keys(self) -> list:
        """Keys in ascending tag order."""
        return sorted(self._elements, key=str.upper)


def normalize_tag(tag: str) -> str:
    """Canonicalize a tag identifier into the table key scheme.

    ``"0010,0020"``, ``"(0010, 0020)"``, ``"x00100020"`` and ``"0010-0020"``
    all map to ``"x00100020"``. Normalizing a key twice is a no-op.
    Characters that are not hex digits are kept as they are.
    """
    compact = _SEPARATORS.sub("", str(tag)).upper()
    if compact.startswith(KEY_MARKER.upper()):
        compact = compact[1:]
    return KEY_MARKER + compact


def strip_key_marker(key: str) -> str:
    """Return the bare 8 digit form of a key (``00100020``)."""
    return normalize_tag(key)[len(KEY_MARKER):]


def format_tag_label(key: str) -> str:
    """Format a key as ``(GGGG, EEEE)``."""
    bare = strip_key_marker(key)
    return f"({bare[:4]}, {bare[4:]})"


def find_element(table: Optional[ElementTable], tag: str) -> Optional[ElementDescriptor]:
    """Look up an element by tag, tolerating key case differences.

    Resolution order: exact key, lowercase key, then a case-insensitive scan
    over all keys. Returns None on a miss.
    """
    if table is None:
        return None

    key = normalize_tag(tag)
    elements = table.elements

    element = elements.get(key)
    if element is not None:
        return element

    element = elements.get(KEY_MARKER + key[len(KEY_MARKER):].lower())
    if element is not None:
        return element

    search_key = key.lower()
    for candidate, element in elements.items():
        if candidate.lower() == search_key:
            return element
    return None


def build_table(descriptors, byte_array: bytes = b"") -> ElementTable:
    """Build an ElementTable from descriptors, keyed by their own tag."""
    elements: Dict[str, ElementDescriptor] = {}
    for descriptor in descriptors:
        elements[descriptor.tag] = descriptor
    return ElementTable(elements, byte_array)
