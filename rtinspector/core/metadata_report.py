#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
元数据报告
Builds the summary sections and the full tag table for one file.

Everything is recomputed per call; no state is kept between files.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from rtinspector.core.dataset_reader import DicomReadError, read_element_table
from rtinspector.core.element_table import (
    ElementTable, find_element, format_tag_label, normalize_tag
)
from rtinspector.core.formatter import ValueFormatter
from rtinspector.core.tag_dictionary import DICOM_TAGS, TagDefinition, TagNameResolver, default_name_resolver
from rtinspector.core.value_resolver import ResolvedValue, resolve_element, resolve_tag, scalar_text
from rtinspector.utils.logger import get_logger, log_performance

logger = get_logger(__name__)

UNKNOWN_NAME = 'Unknown'


@dataclass(frozen=True)
class SummaryGroup:
    """A tab of the summary view, optionally restricted to one modality."""
    name: str
    title: str
    tags: Tuple[TagDefinition, ...]
    modality: Optional[str] = None
    description: str = ''


SUMMARY_GROUPS: Tuple[SummaryGroup, ...] = (
    SummaryGroup(
        name='general',
        title='General',
        tags=(
            DICOM_TAGS['PatientID'],
            DICOM_TAGS['StudyDate'],
            DICOM_TAGS['Modality'],
            DICOM_TAGS['StudyInstanceUID'],
        ),
        description='general metadata',
    ),
    SummaryGroup(
        name='plan',
        title='RT Plan',
        tags=(
            DICOM_TAGS['SOPInstanceUID'],
            DICOM_TAGS['RTPlanLabel'],
            DICOM_TAGS['RTPlanName'],
            DICOM_TAGS['RTPlanDate'],
            DICOM_TAGS['ReferencedRTPlanSequence'],
        ),
        modality='RTPLAN',
        description='an RT Plan',
    ),
    SummaryGroup(
        name='dose',
        title='RT Dose',
        tags=(DICOM_TAGS['ReferencedRTPlanSequence'],),
        modality='RTDOSE',
        description='an RT Dose',
    ),
    SummaryGroup(
        name='structure',
        title='RT Structure',
        tags=(
            DICOM_TAGS['FrameOfReferenceUID'],
            DICOM_TAGS['ReferencedFrameOfReferenceSequence'],
        ),
        modality='RTSTRUCT',
        description='an RT Structure',
    ),
)


@dataclass(frozen=True)
class SummaryEntry:
    label: str
    value: ResolvedValue
    tag: str
    display: str

    @property
    def tag_label(self) -> str:
        return format_tag_label(self.tag)


@dataclass
class SummarySection:
    group: SummaryGroup
    entries: List[SummaryEntry] = field(default_factory=list)
    empty_message: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass(frozen=True)
class TableRow:
    key: str
    tag_label: str
    name: str
    value: str


@dataclass
class InspectionReport:
    """Everything shown for one file."""
    file_name: str
    file_size: int
    element_count: int
    summary: Dict[str, SummarySection]
    rows: List[TableRow]

    @property
    def file_size_text(self) -> str:
        return format_file_size(self.file_size)


def format_file_size(size: int) -> str:
    """格式化文件大小，例如 1536 -> '1.5 KB'"""
    if size <= 0:
        return '0 Bytes'
    units = ['Bytes', 'KB', 'MB', 'GB']
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    value = round(value, 2)
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {units[index]}"


def get_modality(table: ElementTable) -> Optional[str]:
    return scalar_text(resolve_tag(table, DICOM_TAGS['Modality'].tag))


def build_summary_section(table: ElementTable, group: SummaryGroup,
                          formatter: Optional[ValueFormatter] = None) -> SummarySection:
    """Resolve the tags of one summary group.

    A group tied to a modality stays empty, with a message naming the
    modality found, when the file has a different one.
    """
    formatter = formatter or ValueFormatter()
    section = SummarySection(group=group)

    if group.modality is not None:
        modality = get_modality(table)
        if modality != group.modality:
            section.empty_message = (
                f"This file is not {group.description}. Modality: {modality or UNKNOWN_NAME}")
            return section

    for definition in group.tags:
        descriptor = find_element(table, definition.tag)
        value = resolve_element(table, descriptor)
        section.entries.append(SummaryEntry(
            label=definition.name,
            value=value,
            tag=normalize_tag(definition.tag),
            display=formatter.format_value(
                value, descriptor.length if descriptor is not None else None),
        ))

    if not section.entries:
        section.empty_message = f"No {group.title} metadata available"
    return section


def build_summary(table: ElementTable,
                  formatter: Optional[ValueFormatter] = None) -> Dict[str, SummarySection]:
    """Build every summary group, keyed by group name in display order."""
    formatter = formatter or ValueFormatter()
    summary: Dict[str, SummarySection] = OrderedDict()
    for group in SUMMARY_GROUPS:
        summary[group.name] = build_summary_section(table, group, formatter)
    return summary


def build_table_rows(table: ElementTable,
                     names: Optional[TagNameResolver] = None,
                     formatter: Optional[ValueFormatter] = None) -> List[TableRow]:
    """One row per element, sorted by tag."""
    names = names or TagNameResolver()
    formatter = formatter or ValueFormatter()
    rows = []

    for key in table.sorted_keys():
        descriptor = table.elements[key]
        name = descriptor.name or names.lookup(key) or UNKNOWN_NAME
        value = formatter.format_table_value(key, descriptor, resolve_element(table, descriptor))
        rows.append(TableRow(
            key=key,
            tag_label=format_tag_label(key),
            name=name,
            value=value,
        ))
    return rows


@log_performance
def inspect_bytes(data: bytes, file_name: str = '',
                  names: Optional[TagNameResolver] = None,
                  formatter: Optional[ValueFormatter] = None) -> InspectionReport:
    """Parse DICOM bytes and build the complete report.

    Raises:
        DicomReadError: the bytes could not be parsed
    """
    names = names or default_name_resolver()
    formatter = formatter or ValueFormatter()

    table = read_element_table(data)
    report = InspectionReport(
        file_name=file_name,
        file_size=len(data),
        element_count=len(table),
        summary=build_summary(table, formatter),
        rows=build_table_rows(table, names, formatter),
    )
    logger.info(f"Report built for {file_name or '<bytes>'}: {len(report.rows)} tags")
    return report


def inspect_file(file_path: Union[str, Path],
                 names: Optional[TagNameResolver] = None,
                 formatter: Optional[ValueFormatter] = None) -> InspectionReport:
    """Read a file and build its report."""
    path = Path(file_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DicomReadError(f"Error reading file: {e}") from e
    return inspect_bytes(data, path.name, names, formatter)
