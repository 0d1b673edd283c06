"""Helm chart 仓库协议注册表

每个 chart 即一个库；版本为 chart 自身的语义版本，
文件以 <chart>/helm/<version>/<归档内路径> 的形式交给回调。
"""

from __future__ import annotations

import logging
import posixpath

from libvendor.clients.helm import CachingClient, HelmRepositoryClient
from libvendor.core.exceptions import FormatError, StateError
from libvendor.core.models import LibraryRef, RegistryConfig
from libvendor.pkg.parts import PartMetadata
from libvendor.registry.base import DirCallback, FileCallback, Registry
from libvendor.registry.spec import LibraryEntry, Spec
from libvendor.utils.archive import unarchive_tgz
from libvendor.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)

HOOK_MARKER = b"helm.sh/hook"
_TEMPLATE_EXTS = (".yaml", ".yml")


def contains_helm_hook(name: str, data: bytes) -> bool:
    """templates 目录下的 YAML 模板若带 hook 注解则跳过"""
    directory = posixpath.dirname(name)
    if "templates" in directory.split("/") and name.endswith(_TEMPLATE_EXTS):
        return HOOK_MARKER in data
    return False


class HelmRegistry(Registry):
    """chart 仓库注册表"""

    def __init__(
        self,
        config: RegistryConfig,
        client: HelmRepositoryClient | CachingClient | None = None,
    ) -> None:
        super().__init__(config)
        self.client = client or CachingClient(HelmRepositoryClient(config.uri))

    def fetch_registry_spec(self) -> Spec:
        """由仓库索引即时生成清单，每个 chart 取最新版本"""
        spec = Spec()
        for chart in self.client.repository().latest():
            if not chart.name:
                raise FormatError(f"chart 仓库 {self.uri} 的 entries 无效")
            spec.libraries[chart.name] = LibraryEntry(path=chart.name, version=chart.version)
        return spec

    def resolve_library_spec(self, part: str, version: str = "") -> PartMetadata:
        chart = self.client.chart(part, version)
        return PartMetadata(
            name=chart.name,
            version=chart.version,
            description=chart.description,
        )

    def resolve_library(
        self,
        part: str,
        alias: str,
        version: str,
        on_file: FileCallback,
        on_dir: DirCallback | None = None,
    ) -> tuple[PartMetadata, LibraryRef]:
        metadata = self.resolve_library_spec(part, version)
        chart = self.client.chart(part, version)

        def handle(name: str, data: bytes) -> None:
            path = posixpath.join(chart.name, "helm", chart.version, name)
            if contains_helm_hook(path, data):
                logger.debug("跳过带 hook 的模板: %s", path)
                return
            on_file(path, data)

        for url in chart.urls:
            unarchive_tgz(self.client.fetch(url), handle)

        ref = LibraryRef(name=alias or part, registry=self.name, version=chart.version)
        return metadata, ref

    def cache_root(self, registry_name: str, rel_path: str) -> str:
        return posixpath.join(registry_name, rel_path)

    def update(self, version: str = "") -> str:
        """索引总是实时读取，没有需要推进的固定版本"""
        if version:
            raise StateError(
                f"注册表 {self.name} 不支持固定到指定版本 '{version}'"
            )
        return ""

    def validate_uri(self, uri: str) -> None:
        validate_url_scheme(uri, context="helm repository")
