#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pydicom 解析适配测试

使用 pydicom 写出的文件字节构造元素表
"""

import pytest

from rtinspector.core.dataset_reader import (
    DicomReadError, is_supported_file, read_element_table, read_element_table_from_file, tag_key
)
from rtinspector.core.element_table import find_element
from rtinspector.core.value_resolver import (
    FlattenedItem, RecordList, Scalar, decode_raw_value, resolve_tag
)


def test_tag_key():
    assert tag_key(0x00100020) == "x00100020"
    assert tag_key(0x7FE00010) == "x7FE00010"


@pytest.mark.parametrize("name, supported", [
    ("plan.dcm", True),
    ("PLAN.DCM", True),
    ("dose.dicom", True),
    ("notes.txt", False),
    ("no_extension", False),
])
def test_is_supported_file(name, supported):
    assert is_supported_file(name) is supported


class TestReadElementTable:
    """元素表构造测试"""

    def test_descriptors(self, rt_plan_bytes):
        table = read_element_table(rt_plan_bytes)

        patient_id = find_element(table, "00100020")
        assert patient_id is not None
        assert patient_id.vr == "LO"
        assert patient_id.length == 6
        assert table.byte_array == rt_plan_bytes

    def test_raw_offsets_point_into_file(self, rt_plan_bytes):
        """原始解码器应能从文件字节中读出值"""
        table = read_element_table(rt_plan_bytes)
        assert decode_raw_value(table, find_element(table, "00100020")) == "12345"
        assert decode_raw_value(table, find_element(table, "300A0002")) == "Prostate"

    def test_structured_values(self, rt_plan_bytes):
        table = read_element_table(rt_plan_bytes)
        assert resolve_tag(table, "00080060") == Scalar("RTPLAN")
        assert resolve_tag(table, "00100010") == Scalar("Test^Patient")
        assert resolve_tag(table, "00280010") == Scalar(2)

    def test_file_meta_included(self, rt_plan_bytes):
        table = read_element_table(rt_plan_bytes)
        assert find_element(table, "00020010") is not None
        assert resolve_tag(table, "00020003") == Scalar("1.2.3.4.5")

    def test_sequences_become_item_tables(self, rt_plan_bytes):
        table = read_element_table(rt_plan_bytes)

        sequence = find_element(table, "300C0002")
        assert sequence.vr == "SQ"
        assert sequence.item_count == 2

        assert resolve_tag(table, "300C0002") == RecordList((
            FlattenedItem(
                referenced_sop_instance_uid="1.2.3.4.100",
                referenced_sop_class_uid="1.2.840.10008.5.1.4.1.1.481.5",
            ),
            "Item 2 — no readable fields",
        ))
        assert resolve_tag(table, "30060010") == RecordList((
            FlattenedItem(frame_of_reference_uid="1.2.3.4.99"),
        ))

    def test_nested_raw_offsets(self, rt_plan_bytes):
        table = read_element_table(rt_plan_bytes)
        item = find_element(table, "300C0002").items[0]
        assert decode_raw_value(item, find_element(item, "00081155")) == "1.2.3.4.100"

    def test_pixel_data(self, rt_plan_bytes):
        table = read_element_table(rt_plan_bytes)
        pixel_data = find_element(table, "7FE00010")
        assert pixel_data.vr == "OB"
        assert pixel_data.length == 16

    def test_empty_input(self):
        with pytest.raises(DicomReadError):
            read_element_table(b"")

    def test_read_from_file(self, tmp_path, rt_dose_bytes):
        path = tmp_path / "dose.dcm"
        path.write_bytes(rt_dose_bytes)
        table = read_element_table_from_file(path)
        assert resolve_tag(table, "00080060") == Scalar("RTDOSE")

    def test_missing_file(self, tmp_path):
        with pytest.raises(DicomReadError):
            read_element_table_from_file(tmp_path / "missing.dcm")
