#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
日志模块测试
"""

import logging
import logging.handlers

import pytest

from rtinspector.utils.logger import (
    DEFAULT_BACKUP_COUNT, DEFAULT_MAX_FILE_SIZE, LOG_FILE_NAME,
    default_log_file, log_performance, parse_level, setup_logger
)


@pytest.fixture
def root_logger():
    """测试结束后撤销 setup_logger 的修改"""
    root = logging.getLogger()
    level = root.level
    yield root
    setup_logger(console_output=False)
    root.setLevel(level)


@log_performance
def build_quickly(value):
    return value * 2


@log_performance(slow_threshold=-1)
def build_slowly():
    return "done"


@log_performance
def build_badly():
    raise ValueError("not DICOM")


class TestLogPerformance:

    def test_result_and_debug_timing(self, caplog):
        caplog.set_level(logging.DEBUG)
        assert build_quickly(21) == 42
        records = [r for r in caplog.records if "build_quickly" in r.getMessage()]
        assert [r.levelno for r in records] == [logging.DEBUG]

    def test_slow_call_is_a_warning(self, caplog):
        caplog.set_level(logging.DEBUG)
        assert build_slowly() == "done"
        records = [r for r in caplog.records if "build_slowly" in r.getMessage()]
        assert [r.levelno for r in records] == [logging.WARNING]

    def test_failure_is_reraised_and_logged_once(self, caplog):
        caplog.set_level(logging.DEBUG)
        with pytest.raises(ValueError):
            build_badly()
        records = [r for r in caplog.records if "build_badly" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "ValueError: not DICOM" in records[0].getMessage()

    def test_keeps_function_name(self):
        assert build_quickly.__name__ == "build_quickly"
        assert build_slowly.__name__ == "build_slowly"


@pytest.mark.parametrize("level, expected", [
    ("debug", logging.DEBUG),
    ("WARNING", logging.WARNING),
    (logging.ERROR, logging.ERROR),
    ("30", logging.WARNING),
    ("verbose", logging.INFO),
    (None, logging.INFO),
])
def test_parse_level(level, expected):
    assert parse_level(level) == expected


class TestSetupLogger:

    def test_file_handler_defaults(self, tmp_path, root_logger):
        log_file = tmp_path / "logs" / "rtinspector.log"
        handlers = setup_logger(log_file=log_file, level="debug", console_output=False)

        assert len(handlers) == 1
        handler = handlers[0]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == DEFAULT_MAX_FILE_SIZE
        assert handler.backupCount == DEFAULT_BACKUP_COUNT
        assert root_logger.level == logging.DEBUG
        assert log_file.exists()

    def test_reconfigure_replaces_only_own_handlers(self, tmp_path, root_logger):
        other = logging.NullHandler()
        root_logger.addHandler(other)
        try:
            first = setup_logger(log_file=tmp_path / "a.log", console_output=False)
            second = setup_logger(level="WARNING", console_output=True)

            assert first[0] not in root_logger.handlers
            assert second[0] in root_logger.handlers
            assert other in root_logger.handlers
            assert root_logger.level == logging.WARNING
        finally:
            root_logger.removeHandler(other)


def test_default_log_file_is_not_relative(qapp):
    path = default_log_file()
    assert path.is_absolute()
    assert path.name == LOG_FILE_NAME
