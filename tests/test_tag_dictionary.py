#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
标签名称字典测试
"""

from rtinspector.core.tag_dictionary import (
    TAG_NAMES, PydicomTagDictionary, TagNameResolver, default_name_resolver
)


class StaticProvider:
    def __init__(self, names):
        self.names = names
        self.calls = []

    def lookup(self, key):
        self.calls.append(key)
        return self.names.get(key)


class BrokenProvider:
    def lookup(self, key):
        raise RuntimeError("dictionary unavailable")


def test_builtin_names():
    resolver = TagNameResolver()
    assert resolver.lookup("00100020") == "Patient ID"
    assert resolver.lookup("x00100020") == "Patient ID"
    assert resolver.lookup("0020000d") == "Study Instance UID"
    assert resolver.lookup("7FE00010") == "Pixel Data"


def test_builtin_takes_precedence():
    provider = StaticProvider({"00100020": "Something Else"})
    resolver = TagNameResolver(provider)
    assert resolver.lookup("00100020") == "Patient ID"
    assert provider.calls == []


def test_external_provider_used_on_miss():
    provider = StaticProvider({"00181030": "Protocol Name"})
    resolver = TagNameResolver(provider)
    assert resolver.lookup("0018,1030") == "Protocol Name"
    assert provider.calls == ["00181030"]


def test_miss_returns_none():
    assert TagNameResolver().lookup("00181030") is None
    assert TagNameResolver(StaticProvider({})).lookup("00181030") is None


def test_broken_provider_is_a_miss():
    assert TagNameResolver(BrokenProvider()).lookup("00181030") is None


def test_pydicom_dictionary():
    provider = PydicomTagDictionary()
    assert provider.lookup("00181030") == "Protocol Name"
    assert provider.lookup("00991234") is None
    assert provider.lookup("not-hex") is None


def test_default_resolver_chain():
    resolver = default_name_resolver()
    assert resolver.lookup("00100020") == "Patient ID"
    assert resolver.lookup("00181030") == "Protocol Name"


def test_builtin_keys_are_normalized():
    for key in TAG_NAMES:
        assert len(key) == 8
        assert key == key.upper()
