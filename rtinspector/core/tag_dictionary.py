#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DICOM 标签名称字典
Built-in tag names and the name lookup chain.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from pydicom.datadict import dictionary_description

from rtinspector.core.element_table import strip_key_marker
from rtinspector.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TagDefinition:
    """A tag shown in the summary view."""
    tag: str
    name: str


# 摘要视图使用的标签
DICOM_TAGS = {
    # 通用
    'PatientID': TagDefinition('00100020', 'Patient ID'),
    'StudyDate': TagDefinition('00080020', 'Study Date'),
    'Modality': TagDefinition('00080060', 'Modality'),
    'StudyInstanceUID': TagDefinition('0020000D', 'Study Instance UID'),

    # RT Plan
    'SOPInstanceUID': TagDefinition('00080018', 'SOP Instance UID'),
    'RTPlanLabel': TagDefinition('300A0002', 'RT Plan Label'),
    'RTPlanName': TagDefinition('300A0003', 'RT Plan Name'),
    'RTPlanDate': TagDefinition('300A0006', 'RT Plan Date'),
    'ReferencedRTPlanSequence': TagDefinition('300C0002', 'Referenced RT Plan Sequence'),

    # RT Structure Set
    'FrameOfReferenceUID': TagDefinition('00200052', 'Frame of Reference UID'),
    'ReferencedFrameOfReferenceSequence': TagDefinition(
        '30060010', 'Referenced Frame of Reference Sequence'),
}


# 常用标签名称（优先于外部字典）
TAG_NAMES = {
    '00020000': 'File Meta Information Group Length',
    '00020001': 'File Meta Information Version',
    '00020002': 'Media Storage SOP Class UID',
    '00020003': 'Media Storage SOP Instance UID',
    '00020010': 'Transfer Syntax UID',
    '00020012': 'Implementation Class UID',
    '00020013': 'Implementation Version Name',
    '00080005': 'Specific Character Set',
    '00080012': 'Instance Creation Date',
    '00080013': 'Instance Creation Time',
    '00080016': 'SOP Class UID',
    '00080018': 'SOP Instance UID',
    '00080020': 'Study Date',
    '00080021': 'Series Date',
    '00080023': 'Content Date',
    '00080030': 'Study Time',
    '00080031': 'Series Time',
    '00080033': 'Content Time',
    '00080050': 'Accession Number',
    '00080060': 'Modality',
    '00080070': 'Manufacturer',
    '00080090': 'Referring Physician Name',
    '00081010': 'Station Name',
    '00081030': 'Study Description',
    '0008103E': 'Series Description',
    '00081048': 'Physician(s) of Record',
    '00081070': 'Operator Name',
    '00081090': 'Manufacturer Model Name',
    '00081150': 'Referenced SOP Class UID',
    '00081155': 'Referenced SOP Instance UID',
    '00100010': 'Patient Name',
    '00100020': 'Patient ID',
    '00100030': 'Patient Birth Date',
    '00100032': 'Patient Birth Time',
    '00100040': 'Patient Sex',
    '00101000': 'Other Patient IDs',
    '00180050': 'Slice Thickness',
    '00181000': 'Device Serial Number',
    '00181020': 'Software Version(s)',
    '0020000D': 'Study Instance UID',
    '0020000E': 'Series Instance UID',
    '00200010': 'Study ID',
    '00200011': 'Series Number',
    '00200032': 'Image Position (Patient)',
    '00200037': 'Image Orientation (Patient)',
    '00200052': 'Frame of Reference UID',
    '00201040': 'Slice Location',
    '00280002': 'Samples per Pixel',
    '00280004': 'Photometric Interpretation',
    '00280008': 'Number of Frames',
    '00280009': 'Frame Increment Pointer',
    '00280010': 'Rows',
    '00280011': 'Columns',
    '00280030': 'Pixel Spacing',
    '00280100': 'Bits Allocated',
    '00280101': 'Bits Stored',
    '00280102': 'High Bit',
    '00280103': 'Pixel Representation',
    '30040002': 'Dose Units',
    '30040004': 'Dose Type',
    '3004000A': 'Dose Summation Type',
    '3004000C': 'Grid Frame Offset Vector',
    '3004000E': 'Dose Grid Scaling',
    '30040014': 'Dose Comment',
    '30060002': 'Structure Set Label',
    '30060004': 'Structure Set Name',
    '30060008': 'Structure Set Date',
    '30060009': 'Structure Set Time',
    '30060010': 'Referenced Frame of Reference Sequence',
    '30060020': 'Structure Set ROI Sequence',
    '30060039': 'ROI Contour Sequence',
    '30060080': 'RT ROI Observations Sequence',
    '300A0002': 'RT Plan Label',
    '300A0003': 'RT Plan Name',
    '300A0006': 'RT Plan Date',
    '300C0002': 'Referenced RT Plan Sequence',
    '300C0006': 'Referenced SOP Instance UID',
    '300C0060': 'Referenced Structure Set Sequence',
    '300E0002': 'Approval Status',
    '300E0004': 'Review Date',
    '300E0005': 'Review Time',
    '300E0008': 'Reviewer Name',
    '7FE00010': 'Pixel Data',
}


class TagNameProvider(Protocol):
    """External tag dictionary."""

    def lookup(self, key: str) -> Optional[str]:
        ...


class PydicomTagDictionary:
    """Tag names from pydicom's data dictionary."""

    def lookup(self, key: str) -> Optional[str]:
        try:
            tag = int(key, 16)
        except ValueError:
            return None
        try:
            name = dictionary_description(tag)
        except KeyError:
            return None
        return name or None


class TagNameResolver:
    """Maps a tag to a readable name.

    The built-in table is consulted first, then the external provider. A miss
    returns None; substituting "Unknown" is up to the caller.
    """

    def __init__(self, external: Optional[TagNameProvider] = None) -> None:
        self.external = external

    def lookup(self, key: str) -> Optional[str]:
        """查找标签名称

        Args:
            key: 标签，带或不带 ``x`` 前缀

        Returns:
            Optional[str]: 标签名称，未找到返回 None
        """
        bare = strip_key_marker(key)

        name = TAG_NAMES.get(bare)
        if name:
            return name

        if self.external is None:
            return None
        try:
            return self.external.lookup(bare)
        except Exception as e:
            logger.warning(f"External dictionary lookup failed for {bare}: {e}")
            return None


def default_name_resolver() -> TagNameResolver:
    """Resolver backed by the built-in table and pydicom's dictionary."""
    return TagNameResolver(PydicomTagDictionary())
