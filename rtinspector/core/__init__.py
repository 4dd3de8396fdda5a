"""
核心模块

元素表、值解析与显示格式化。
"""

from .element_table import ElementDescriptor, ElementTable, find_element, normalize_tag
from .value_resolver import ABSENT, FlattenedItem, RecordList, Scalar, resolve_element, resolve_tag
from .formatter import DisplayLimits, ValueFormatter
from .tag_dictionary import TagNameResolver, default_name_resolver
from .metadata_report import InspectionReport, build_summary, build_table_rows, inspect_bytes, inspect_file

__all__ = [
    'ElementDescriptor',
    'ElementTable',
    'find_element',
    'normalize_tag',
    'ABSENT',
    'FlattenedItem',
    'RecordList',
    'Scalar',
    'resolve_element',
    'resolve_tag',
    'DisplayLimits',
    'ValueFormatter',
    'TagNameResolver',
    'default_name_resolver',
    'InspectionReport',
    'build_summary',
    'build_table_rows',
    'inspect_bytes',
    'inspect_file',
]
