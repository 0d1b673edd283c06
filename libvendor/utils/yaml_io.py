"""YAML 读写工具

集中管理 YAML 的序列化/反序列化：统一 UTF-8、空值保护、
写入一律走 TransactionWriter，读者永远看不到写了一半的文件。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from libvendor.utils.txwriter import write_file

logger = logging.getLogger(__name__)

# YAML 文件最大大小限制 (10MB)
MAX_YAML_SIZE = 10 * 1024 * 1024


def parse_yaml(text: str | bytes, *, source: str = "<memory>") -> dict[str, Any]:
    """解析 YAML 文本为字典，空文档返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 顶层不是字典
    """
    result = yaml.safe_load(text)
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ValueError(
            f"{source} 顶层不是字典 (实际类型: {type(result).__name__})"
        )
    return result


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    文件不存在或为空时返回空字典。

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 文件过大或顶层不是字典
        OSError: 读取失败
    """
    p = Path(path)
    if not p.is_file():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_YAML_SIZE:
        raise ValueError(
            f"YAML 文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_YAML_SIZE} 字节"
        )

    try:
        return parse_yaml(p.read_text(encoding="utf-8"), source=str(p))
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", p, e)
        raise


def dump_yaml(data: Any) -> str:
    """序列化为 YAML 文本（保持键顺序，允许 Unicode）"""
    return yaml.safe_dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )


def save_yaml(path: str | Path, data: Any) -> None:
    """事务式写入 YAML 文件，父目录在提交时创建"""
    p = Path(path)
    try:
        write_file(p, dump_yaml(data).encode("utf-8"))
    except (PermissionError, OSError) as e:
        logger.error("写入文件失败: %s, 错误: %s", p, e)
        raise
