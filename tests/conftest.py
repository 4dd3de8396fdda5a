#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pytest配置文件

为测试套件提供共享的fixtures和配置
"""

import os
import sys
from io import BytesIO
from pathlib import Path

import pytest

# 无显示环境下运行Qt
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from rtinspector.core.element_table import ElementDescriptor, ElementTable  # noqa: E402


class TableBuilder:
    """按顺序把原始字节写入共享缓冲区，生成带偏移量的元素描述"""

    def __init__(self) -> None:
        self.buffer = bytearray(b"\xff" * 16)
        self.descriptors = []

    def raw(self, key: str, vr: str, data: bytes, **kwargs) -> ElementDescriptor:
        offset = len(self.buffer)
        self.buffer.extend(data)
        descriptor = ElementDescriptor(tag=key, vr=vr, length=len(data),
                                       data_offset=offset, **kwargs)
        self.descriptors.append(descriptor)
        return descriptor

    def add(self, descriptor: ElementDescriptor) -> ElementDescriptor:
        self.descriptors.append(descriptor)
        return descriptor

    def build(self) -> ElementTable:
        return ElementTable({d.tag: d for d in self.descriptors}, bytes(self.buffer))


@pytest.fixture(scope="function")
def table_builder():
    """提供 TableBuilder 实例的fixture"""
    return TableBuilder()


@pytest.fixture(scope="session")
def qapp():
    """创建QApplication实例的fixture"""
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def _write_dataset(ds) -> bytes:
    import pydicom

    buffer = BytesIO()
    pydicom.dcmwrite(buffer, ds, enforce_file_format=True)
    return buffer.getvalue()


def make_rt_dataset(modality: str = "RTPLAN"):
    """构造一个最小的 RT 数据集"""
    from pydicom.dataset import Dataset, FileMetaDataset
    from pydicom.sequence import Sequence
    from pydicom.uid import ExplicitVRLittleEndian

    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = "1.2.840.10008.5.1.4.1.1.481.5"
    file_meta.MediaStorageSOPInstanceUID = "1.2.3.4.5"
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = Dataset()
    ds.file_meta = file_meta
    ds.SOPClassUID = "1.2.840.10008.5.1.4.1.1.481.5"
    ds.SOPInstanceUID = "1.2.3.4.5"
    ds.PatientID = "12345"
    ds.PatientName = "Test^Patient"
    ds.StudyDate = "20240102"
    ds.Modality = modality
    ds.StudyInstanceUID = "1.2.3.4"
    ds.RTPlanLabel = "Prostate"
    ds.RTPlanName = "Plan A"
    ds.RTPlanDate = "20240103"
    ds.FrameOfReferenceUID = "1.2.3.4.99"
    ds.Rows = 2

    referenced = Dataset()
    referenced.ReferencedSOPClassUID = "1.2.840.10008.5.1.4.1.1.481.5"
    referenced.ReferencedSOPInstanceUID = "1.2.3.4.100"
    ds.ReferencedRTPlanSequence = Sequence([referenced, Dataset()])

    frame_ref = Dataset()
    frame_ref.FrameOfReferenceUID = "1.2.3.4.99"
    ds.ReferencedFrameOfReferenceSequence = Sequence([frame_ref])

    ds.add_new(0x7FE00010, "OB", b"\x00\x01" * 8)
    return ds


@pytest.fixture(scope="function")
def rt_plan_bytes():
    """pydicom 写出的 RT Plan 文件字节"""
    return _write_dataset(make_rt_dataset("RTPLAN"))


@pytest.fixture(scope="function")
def rt_dose_bytes():
    """pydicom 写出的 RT Dose 文件字节"""
    return _write_dataset(make_rt_dataset("RTDOSE"))
