"""Helm chart 仓库客户端

index.yaml 结构:
    entries:
      app-a:
        - {name: app-a, version: 0.3.0, urls: [charts/app-a-0.3.0.tgz], description: ...}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin, urlparse, urlunparse

import yaml

from libvendor.core.exceptions import FormatError, NotFoundError
from libvendor.utils.net import http_get, validate_url_scheme
from libvendor.utils.version import parse_version
from libvendor.utils.yaml_io import parse_yaml

logger = logging.getLogger(__name__)

INDEX_FILE = "index.yaml"

Getter = Callable[[str], bytes]


@dataclass
class RepositoryChart:
    name: str
    version: str
    urls: list[str] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryChart:
        return cls(
            name=str(data.get("name", "") or ""),
            version=str(data.get("version", "") or ""),
            urls=[str(u) for u in data.get("urls") or []],
            description=str(data.get("description", "") or ""),
        )


@dataclass
class Repository:
    charts: dict[str, list[RepositoryChart]] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, text: str | bytes) -> Repository:
        try:
            data = parse_yaml(text, source=INDEX_FILE)
        except (yaml.YAMLError, ValueError) as e:
            raise FormatError(f"无法解析 chart 仓库 index.yaml: {e}") from e
        charts = {
            name: [RepositoryChart.from_dict(c or {}) for c in entries or []]
            for name, entries in (data.get("entries") or {}).items()
        }
        return cls(charts=charts)

    def latest(self) -> list[RepositoryChart]:
        """每个 chart 取语义版本最高的条目，按名称排序

        版本无法解析的条目永远不会胜出。
        """
        out = []
        for name in sorted(self.charts):
            best: RepositoryChart | None = None
            best_ver = None
            for chart in self.charts[name]:
                ver = parse_version(chart.version)
                if ver is None:
                    continue
                if best_ver is None or ver > best_ver:
                    best, best_ver = chart, ver
            if best is not None:
                out.append(best)
        return out


def normalize_repository_uri(uri: str) -> str:
    """仅允许 http/https，缺少 index.yaml 时补上"""
    validate_url_scheme(uri, context="helm repository")
    parsed = urlparse(uri)
    if parsed.path.endswith(INDEX_FILE):
        return uri
    path = parsed.path.rstrip("/") + "/" + INDEX_FILE
    return urlunparse(parsed._replace(path=path))


class HelmRepositoryClient:
    """chart 仓库 HTTP 客户端"""

    def __init__(self, uri: str, getter: Getter | None = None) -> None:
        self.index_url = normalize_repository_uri(uri)
        self._get = getter or http_get

    def repository(self) -> Repository:
        return Repository.from_yaml(self._get(self.index_url))

    def chart(self, name: str, version: str = "") -> RepositoryChart:
        """按 (name, version) 精确查找；version 为空取最新"""
        repo = self.repository()
        if not version:
            for chart in repo.latest():
                if chart.name == name:
                    return chart
            raise NotFoundError(f"chart '{name}' 不存在")

        charts = repo.charts.get(name)
        if charts is None:
            raise NotFoundError(f"chart '{name}' 不存在")
        for chart in charts:
            if chart.version == version:
                return chart
        raise NotFoundError(f"chart '{name}' 版本 '{version}' 不存在")

    def fetch(self, uri: str) -> bytes:
        """下载 chart 归档；相对地址基于仓库地址解析"""
        if not urlparse(uri).netloc:
            uri = urljoin(self.index_url, uri)
        return self._get(uri)


class CachingClient:
    """在进程内缓存 (name, version) → chart 查询结果，非线程安全"""

    def __init__(self, client: HelmRepositoryClient) -> None:
        self._client = client
        self._cache: dict[tuple[str, str], RepositoryChart] = {}

    def repository(self) -> Repository:
        return self._client.repository()

    def chart(self, name: str, version: str = "") -> RepositoryChart:
        key = (name, version)
        if key not in self._cache:
            self._cache[key] = self._client.chart(name, version)
        return self._cache[key]

    def fetch(self, uri: str) -> bytes:
        return self._client.fetch(uri)
