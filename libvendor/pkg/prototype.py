"""原型（prototype）元数据

原型正文由外部模板引擎求值，这里只读取文件头部的注释标签:

    // @apiVersion 0.0.1
    // @name io.ksonnet.pkg.apache-simple
    // @description Deploys a simple apache server
    // @shortDescription Apache server
    // @param name string Name of the deployment
    // @optionalParam replicas number 1 Number of replicas
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from libvendor.core.exceptions import FormatError, NotFoundError, ValidationError
from libvendor.utils.version import version_sort_key

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "0.0.1"
PROTOTYPE_EXT = ".jsonnet"


@dataclass
class ParamSchema:
    name: str
    type: str = "string"
    description: str = ""
    default: str | None = None

    @property
    def required(self) -> bool:
        return self.default is None


@dataclass
class Prototype:
    name: str
    version: str = ""
    api_version: str = DEFAULT_API_VERSION
    description: str = ""
    short_description: str = ""
    params: list[ParamSchema] = field(default_factory=list)
    body: str = ""

    def required_params(self) -> list[ParamSchema]:
        return [p for p in self.params if p.required]

    def optional_params(self) -> list[ParamSchema]:
        return [p for p in self.params if not p.required]


def parse_prototype(text: str, *, version: str = "", source: str = "") -> Prototype:
    """解析注释标签，遇到第一行非注释内容即停止"""
    tags: dict[str, str] = {}
    params: list[ParamSchema] = []
    body_start = 0
    lines = text.splitlines()

    for idx, raw in enumerate(lines):
        line = raw.strip()
        if not line:
            continue
        if not line.startswith("//"):
            body_start = idx
            break
        content = line[2:].strip()
        if not content.startswith("@"):
            continue
        tag, _, rest = content.partition(" ")
        rest = rest.strip()
        if tag == "@param":
            pname, ptype, pdesc = (rest.split(None, 2) + ["", "", ""])[:3]
            params.append(ParamSchema(name=pname, type=ptype or "string", description=pdesc))
        elif tag == "@optionalParam":
            fields = rest.split(None, 3) + ["", "", "", ""]
            pname, ptype, pdefault, pdesc = fields[:4]
            params.append(ParamSchema(
                name=pname, type=ptype or "string", description=pdesc, default=pdefault,
            ))
        else:
            tags[tag] = rest
    else:
        body_start = len(lines)

    name = tags.get("@name", "")
    if not name:
        raise FormatError(f"原型缺少 @name 标签: {source or '<memory>'}")

    return Prototype(
        name=name,
        version=version,
        api_version=tags.get("@apiVersion", DEFAULT_API_VERSION),
        description=tags.get("@description", ""),
        short_description=tags.get("@shortDescription", tags.get("@description", "")),
        params=params,
        body="\n".join(lines[body_start:]),
    )


def load_prototypes(directory: Path, *, version: str = "") -> list[Prototype]:
    """读取目录下所有 .jsonnet 原型，按路径排序"""
    if not directory.is_dir():
        return []
    result = []
    for path in sorted(directory.rglob(f"*{PROTOTYPE_EXT}")):
        if not path.is_file():
            continue
        result.append(parse_prototype(
            path.read_text(encoding="utf-8"), version=version, source=str(path),
        ))
    return result


def latest_by_name(prototypes: list[Prototype]) -> list[Prototype]:
    """同名原型只保留版本最高者，结果按名称排序"""
    by_name: dict[str, Prototype] = {}
    for proto in prototypes:
        current = by_name.get(proto.name)
        if current is None or version_sort_key(proto.version) > version_sort_key(current.version):
            by_name[proto.name] = proto
    return [by_name[name] for name in sorted(by_name)]


def search_names(query: str, prototypes: list[Prototype]) -> list[Prototype]:
    """名称包含 query 的原型，按名称排序"""
    return sorted((p for p in prototypes if query in p.name), key=lambda p: p.name)


def find_by_suffix(query: str, prototypes: list[Prototype]) -> Prototype:
    """按名称后缀定位唯一原型，如 `apache-simple` 对应 `io.ksonnet.pkg.apache-simple`

    异常:
        NotFoundError: 没有匹配
        ValidationError: 匹配多于一个
    """
    matches = [p for p in prototypes if p.name.endswith(query)]
    if not matches:
        raise NotFoundError(f"没有名称以 '{query}' 结尾的原型")
    if len(matches) > 1:
        names = ", ".join(sorted(p.name for p in matches))
        raise ValidationError(f"原型名 '{query}' 有歧义，可能是: {names}")
    return matches[0]
