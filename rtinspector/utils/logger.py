#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
日志管理模块
配置 RT Inspector 的日志输出，并提供报告构建的耗时记录
"""

import logging
import logging.handlers
import sys
import time
import functools
from pathlib import Path
from typing import List, Optional, Union

from PySide6.QtCore import QStandardPaths

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = 'rtinspector.log'

# 一次只查看一个文件，日志量很小
DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_BACKUP_COUNT = 2

# 超过该耗时（秒）的报告构建记为 warning
DEFAULT_SLOW_THRESHOLD = 1.0

# setup_logger 安装的 handler，重新配置时只替换这些
_installed_handlers: List[logging.Handler] = []


class ColoredFormatter(logging.Formatter):
    """控制台输出按级别着色"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # 在副本上着色，文件 handler 收到的 record 不变
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def default_log_file() -> Path:
    """用户数据目录下的日志文件，而不是当前工作目录"""
    data_dir = QStandardPaths.writableLocation(QStandardPaths.AppLocalDataLocation)
    base = Path(data_dir) if data_dir else Path.home() / '.rtinspector'
    return base / 'logs' / LOG_FILE_NAME


def parse_level(level: Union[str, int, None]) -> int:
    """设置中的日志级别可能是名称或数字，无效值按 INFO 处理"""
    if isinstance(level, int):
        return level
    name = str(level or '').strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logger(
    log_file: Optional[Union[str, Path]] = None,
    level: Union[str, int] = "INFO",
    console_output: bool = True,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    backup_count: int = DEFAULT_BACKUP_COUNT
) -> List[logging.Handler]:
    """配置根日志记录器

    可以重复调用（例如日志级别设置变化后），之前由本函数安装的
    handler 会被替换，其他 handler 保持不变。

    Args:
        log_file: 日志文件路径，None表示不输出到文件
        level: 日志级别名称或数值
        console_output: 是否输出到控制台
        max_file_size: 单个日志文件最大大小（字节）
        backup_count: 保留的备份文件数量

    Returns:
        List[logging.Handler]: 本次安装的 handler
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(parse_level(level))

    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        _installed_handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt='%H:%M:%S'))
        _installed_handlers.append(console_handler)

    for handler in _installed_handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    if log_file:
        logger.info(f"日志文件: {log_file}")
    logger.info(f"日志级别: {logging.getLevelName(root_logger.level)}")
    return list(_installed_handlers)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_performance(func=None, *, slow_threshold: float = DEFAULT_SLOW_THRESHOLD):
    """装饰器：记录函数耗时

    正常耗时记为 debug，超过 slow_threshold 秒记为 warning。
    异常照常抛出，只记一条 warning，由调用方负责报告错误。

    可以写成 ``@log_performance`` 或 ``@log_performance(slow_threshold=0.5)``。
    """
    if func is None:
        return functools.partial(log_performance, slow_threshold=slow_threshold)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.warning(f"{func.__name__} 失败 (耗时 {duration:.3f}秒): {type(e).__name__}: {e}")
            raise
        duration = time.perf_counter() - start_time
        if duration > slow_threshold:
            logger.warning(f"{func.__name__} 较慢: {duration:.3f}秒")
        else:
            logger.debug(f"{func.__name__} 执行时间: {duration:.3f}秒")
        return result
    return wrapper
