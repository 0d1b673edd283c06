"""注册表清单（registry.yaml）及磁盘缓存

清单结构:
    apiVersion: 0.1.0
    kind: ksonnet.io/registry
    version: <pin>
    libraries:
      apache: {path: apache, version: master}

缓存文件按固定版本区分，永不原地修改：新的 pin 产生新的缓存文件。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

from libvendor.core.exceptions import FormatError
from libvendor.utils.txwriter import write_file
from libvendor.utils.version import parse_version
from libvendor.utils.yaml_io import dump_yaml, parse_yaml

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "0.1.0"
DEFAULT_KIND = "ksonnet.io/registry"
# 早期清单写的是 "0.1"，不是合法语义版本
_LEGACY_API_VERSION = "0.1"


@dataclass
class LibraryEntry:
    path: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "version": self.version}


@dataclass
class Spec:
    """注册表清单：库名 → (路径, 版本)"""

    api_version: str = DEFAULT_API_VERSION
    kind: str = DEFAULT_KIND
    version: str = ""
    libraries: dict[str, LibraryEntry] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Spec:
        api_version = str(data.get("apiVersion", "") or "")
        if api_version == _LEGACY_API_VERSION:
            api_version = DEFAULT_API_VERSION
        parsed = parse_version(api_version)
        if parsed is None:
            raise FormatError(f"无法解析注册表清单版本 '{api_version}'")
        if parsed != parse_version(DEFAULT_API_VERSION):
            raise FormatError(
                f"注册表清单版本 '{api_version}' 不受支持（仅支持 {DEFAULT_API_VERSION}）"
            )

        version = str(data.get("version", "") or "")
        if not version:
            git_version = data.get("gitVersion") or {}
            if isinstance(git_version, dict):
                version = str(git_version.get("commitSha", "") or "")

        libraries = {}
        for name, entry in (data.get("libraries") or {}).items():
            entry = entry or {}
            libraries[str(name)] = LibraryEntry(
                path=str(entry.get("path", "") or ""),
                version=str(entry.get("version", "") or ""),
            )

        return cls(
            api_version=api_version,
            kind=str(data.get("kind", "") or DEFAULT_KIND),
            version=version,
            libraries=libraries,
        )

    @classmethod
    def from_yaml(cls, text: str | bytes, *, source: str = "registry.yaml") -> Spec:
        try:
            data = parse_yaml(text, source=source)
        except (yaml.YAMLError, ValueError) as e:
            raise FormatError(f"无法解析注册表清单 {source}: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "version": self.version,
            "libraries": {
                name: entry.to_dict() for name, entry in sorted(self.libraries.items())
            },
        }

    def to_yaml(self) -> bytes:
        return dump_yaml(self.to_dict()).encode("utf-8")


def load_spec(path: str | Path) -> Spec | None:
    """读取缓存的清单；路径不存在或是目录时返回 None

    异常:
        FormatError: 文件存在但无法解析
    """
    p = Path(path)
    if not p.exists() or p.is_dir():
        return None
    return Spec.from_yaml(p.read_bytes(), source=str(p))


def load_or_fetch(path: str | Path, fetch: Callable[[], Spec]) -> Spec:
    """有缓存读缓存，否则调用 fetch 并事务式写入缓存

    目录只在 fetch 成功之后随提交创建，网络失败不会留下空目录。
    目标路径已被目录占用时返回抓取结果但不落盘。
    """
    p = Path(path)
    try:
        cached = load_spec(p)
    except FormatError as e:
        logger.warning("注册表缓存损坏，重新获取: %s (%s)", p, e)
        cached = None
    if cached is not None:
        logger.debug("命中注册表缓存: %s", p)
        return cached

    spec = fetch()
    if p.is_dir():
        logger.warning("注册表缓存路径是目录，跳过写入: %s", p)
        return spec
    write_file(p, spec.to_yaml())
    logger.debug("注册表缓存已写入: %s", p)
    return spec
