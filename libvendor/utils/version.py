"""版本号解析与排序

基于 packaging.version；无法解析的版本返回 None，排序时永远排在最后。
"""

from __future__ import annotations

from packaging.version import InvalidVersion, Version


def parse_version(value: str) -> Version | None:
    """解析版本号，非法时返回 None 而不是抛异常"""
    try:
        return Version(value)
    except (InvalidVersion, TypeError):
        return None


def latest_version(values: list[str]) -> str:
    """返回可解析版本中的最大者；全部不可解析时返回空串"""
    parsed = [(v, parse_version(v)) for v in values]
    valid = [(v, p) for v, p in parsed if p is not None]
    if not valid:
        return ""
    return max(valid, key=lambda item: item[1])[0]


def version_sort_key(value: str) -> tuple[int, Version | None, str]:
    """升序排序键：可解析版本按语义比较，不可解析的按字典序排在最前"""
    parsed = parse_version(value)
    if parsed is None:
        return (0, None, value)
    return (1, parsed, value)
