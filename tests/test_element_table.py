#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
元素表测试

标签规范化与元素查找
"""

import pytest

from rtinspector.core.element_table import (
    ElementDescriptor, ElementTable, build_table, find_element, format_tag_label,
    normalize_tag, strip_key_marker
)


@pytest.mark.parametrize("tag", [
    "00100020",
    "0010,0020",
    "(0010, 0020)",
    "0010-0020",
    " 0010 0020 ",
    "x00100020",
    "X00100020",
])
def test_normalize_tag_variants(tag):
    """不同写法的标签应规范化为同一键"""
    assert normalize_tag(tag) == "x00100020"


@pytest.mark.parametrize("tag", [
    "00100020", "0020000d", "x7fe00010", "300c-0002", "not a tag", "", "xx1234",
])
def test_normalize_tag_is_idempotent(tag):
    once = normalize_tag(tag)
    assert normalize_tag(once) == once


def test_normalize_tag_keeps_non_hex_characters():
    assert normalize_tag("ZZZZ0010") == "xZZZZ0010"


def test_strip_key_marker_and_label():
    assert strip_key_marker("x0020000d") == "0020000D"
    assert strip_key_marker("0020000D") == "0020000D"
    assert format_tag_label("x300C0002") == "(300C, 0002)"


class TestFindElement:
    """元素查找测试"""

    def test_exact_match(self):
        descriptor = ElementDescriptor(tag="x00100020", vr="LO", value="12345")
        table = build_table([descriptor])
        assert find_element(table, "00100020") is descriptor

    def test_lowercase_key_match(self):
        descriptor = ElementDescriptor(tag="x0020000d", vr="UI", value="1.2.3")
        table = build_table([descriptor])
        assert find_element(table, "0020000D") is descriptor

    def test_mixed_case_key_found_by_scan(self):
        descriptor = ElementDescriptor(tag="X0020000d", vr="UI", value="1.2.3")
        table = build_table([descriptor])
        assert find_element(table, "0020000D") is descriptor

    @pytest.mark.parametrize("tag", ["300a0002", "300A0002", "x300a0002", "300a,0002"])
    def test_case_permutations_find_same_descriptor(self, tag):
        descriptor = ElementDescriptor(tag="x300A0002", vr="SH", value="Plan")
        table = build_table([descriptor])
        assert find_element(table, tag) is descriptor

    def test_miss_returns_none(self):
        table = build_table([ElementDescriptor(tag="x00100020", vr="LO")])
        assert find_element(table, "00100010") is None
        assert find_element(None, "00100010") is None

    def test_no_prefix_matching(self):
        table = build_table([ElementDescriptor(tag="x00100020", vr="LO")])
        assert find_element(table, "0010002") is None
        assert find_element(table, "001000200") is None


def test_table_is_read_only():
    table = ElementTable({"x00100020": ElementDescriptor(tag="x00100020", vr="LO")})
    with pytest.raises(TypeError):
        table.elements["x00100010"] = ElementDescriptor(tag="x00100010", vr="PN")
    assert len(table) == 1
    assert "x00100020" in table


def test_sorted_keys():
    table = build_table([
        ElementDescriptor(tag="x7FE00010", vr="OB"),
        ElementDescriptor(tag="x00100020", vr="LO"),
        ElementDescriptor(tag="x00080060", vr="CS"),
    ])
    assert table.sorted_keys() == ["x00080060", "x00100020", "x7FE00010"]
