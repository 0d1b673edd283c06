"""libvendor 日志配置

统一的日志初始化入口，支持人类可读文本与结构化 JSON 两种输出。
CLI 通过环境变量 LIBVENDOR_LOG_LEVEL / LIBVENDOR_LOG_JSON 控制。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

LEVEL_ENV = "LIBVENDOR_LOG_LEVEL"
JSON_ENV = "LIBVENDOR_LOG_JSON"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于 CI 流水线消费"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器（输出到 stderr，重复调用会替换已有 handler）

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR）
        json_output: 为 True 时输出 JSON 行
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        fmt = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)


def setup_logging_from_env() -> None:
    """按环境变量初始化日志"""
    setup_logging(
        level=os.getenv(LEVEL_ENV, "INFO"),
        json_output=os.getenv(JSON_ENV, "") == "1",
    )
