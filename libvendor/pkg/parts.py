"""库元数据（parts.yaml）"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from libvendor.core.exceptions import FormatError
from libvendor.utils.yaml_io import parse_yaml

PARTS_FILE = "parts.yaml"
DEFAULT_API_VERSION = "0.0.1"
DEFAULT_KIND = "ksonnet.io/parts"


@dataclass
class PartMetadata:
    """单个可解析库的描述信息"""

    name: str
    api_version: str = DEFAULT_API_VERSION
    kind: str = DEFAULT_KIND
    version: str = ""
    description: str = ""
    author: str = ""
    contributors: list[dict[str, str]] = field(default_factory=list)
    repository: dict[str, str] = field(default_factory=dict)
    bugs: dict[str, str] = field(default_factory=dict)
    keywords: list[str] = field(default_factory=list)
    quick_start: dict[str, Any] = field(default_factory=dict)
    license: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PartMetadata:
        return cls(
            name=str(data.get("name", "")),
            api_version=str(data.get("apiVersion", DEFAULT_API_VERSION)),
            kind=str(data.get("kind", DEFAULT_KIND)),
            version=str(data.get("version", "") or ""),
            description=str(data.get("description", "") or ""),
            author=str(data.get("author", "") or ""),
            contributors=list(data.get("contributors") or []),
            repository=dict(data.get("repository") or {}),
            bugs=dict(data.get("bugs") or {}),
            keywords=[str(k) for k in data.get("keywords") or []],
            quick_start=dict(data.get("quickStart") or {}),
            license=str(data.get("license", "") or ""),
        )

    @classmethod
    def from_yaml(cls, text: str | bytes, *, source: str = PARTS_FILE) -> PartMetadata:
        try:
            data = parse_yaml(text, source=source)
        except (yaml.YAMLError, ValueError) as e:
            raise FormatError(f"无法解析库元数据 {source}: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
        }
        optional = {
            "version": self.version,
            "description": self.description,
            "author": self.author,
            "contributors": self.contributors,
            "repository": self.repository,
            "bugs": self.bugs,
            "keywords": self.keywords,
            "quickStart": self.quick_start,
            "license": self.license,
        }
        out.update({k: v for k, v in optional.items() if v})
        return out
