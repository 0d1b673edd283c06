"""路径工具 — 相对路径段校验与根目录包含检查"""

from __future__ import annotations

import os
from pathlib import Path

from libvendor.core.exceptions import ValidationError

_DOT_SEGMENTS = ("", ".", "..")


def validate_rel_segments(value: str, what: str = "路径") -> None:
    """相对路径的每一段都必须是非空普通名称

    异常:
        ValidationError: 绝对路径、空段、"." 或 ".." 段
    """
    if value.startswith("/") or "\\" in value:
        raise ValidationError(f"{what} '{value}' 必须是相对路径")
    if any(seg in _DOT_SEGMENTS for seg in value.split("/")):
        raise ValidationError(f"{what} '{value}' 包含空段或 '.'/'..' 段")


def is_within(path: str | Path, root: str | Path) -> bool:
    """path 是否严格位于 root 之内

    先按字面规范化，再用真实路径比较父目录，
    经由符号链接跳出 root 的路径同样视为在外。
    """
    lexical = Path(os.path.normpath(os.path.abspath(path)))
    real_root = Path(root).resolve()
    real_parent = lexical.parent.resolve()
    return real_parent == real_root or real_root in real_parent.parents


def ensure_within(path: str | Path, root: str | Path) -> Path:
    """返回规范化后的 path；不在 root 之内时抛 ValidationError"""
    if not is_within(path, root):
        raise ValidationError(f"路径 {path} 不在 {root} 之内")
    return Path(os.path.normpath(os.path.abspath(path)))
