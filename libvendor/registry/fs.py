"""本地目录注册表

注册表根目录即 URI（相对路径基于应用根目录解析），
清单与库文件直接从磁盘读取，不经过网络也不做缓存。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from libvendor.core.exceptions import NotFoundError, StateError, ValidationError
from libvendor.core.models import LibraryRef, RegistryConfig
from libvendor.pkg.parts import PARTS_FILE, PartMetadata
from libvendor.registry.base import REGISTRY_FILE, DirCallback, FileCallback, Registry
from libvendor.registry.spec import Spec

logger = logging.getLogger(__name__)


def _resolve_root(uri: str, app_root: str | Path) -> Path:
    path = Path(os.path.expanduser(uri))
    if not path.is_absolute():
        path = Path(app_root) / path
    return Path(os.path.normpath(path))


class FsRegistry(Registry):
    """以本地目录为后端的注册表"""

    def __init__(self, config: RegistryConfig, app_root: str | Path) -> None:
        super().__init__(config)
        self.app_root = Path(app_root)
        self.root = _resolve_root(config.uri, self.app_root)

    @property
    def spec_path(self) -> Path:
        return self.root / REGISTRY_FILE

    def fetch_registry_spec(self) -> Spec:
        if not self.spec_path.is_file():
            raise NotFoundError(f"注册表清单不存在: {self.spec_path}")
        return Spec.from_yaml(self.spec_path.read_bytes(), source=str(self.spec_path))

    def resolve_library_spec(self, part: str, version: str = "") -> PartMetadata:
        path = self.root / part / PARTS_FILE
        if not path.is_file():
            raise NotFoundError(f"库 '{part}' 在注册表 {self.name} 中不存在: {path}")
        return PartMetadata.from_yaml(path.read_bytes(), source=str(path))

    def resolve_library(
        self,
        part: str,
        alias: str,
        version: str,
        on_file: FileCallback,
        on_dir: DirCallback | None = None,
    ) -> tuple[PartMetadata, LibraryRef]:
        metadata = self.resolve_library_spec(part, version)
        part_root = self.root / part

        if on_dir is not None:
            on_dir(part)
        for dirpath, dirnames, filenames in os.walk(part_root):
            dirnames.sort()
            base = Path(dirpath)
            for dirname in dirnames:
                if on_dir is not None:
                    on_dir((base / dirname).relative_to(self.root).as_posix())
            for filename in sorted(filenames):
                path = base / filename
                on_file(path.relative_to(self.root).as_posix(), path.read_bytes())

        ref = LibraryRef(name=alias or part, registry=self.name)
        return metadata, ref

    def cache_root(self, registry_name: str, rel_path: str) -> str:
        return f"{registry_name}/{rel_path.lstrip('/')}"

    def update(self, version: str = "") -> str:
        """本地目录始终是最新内容，没有固定版本"""
        if version:
            raise StateError(
                f"注册表 {self.name} 不支持固定到指定版本 '{version}'"
            )
        return ""

    def validate_uri(self, uri: str) -> None:
        path = _resolve_root(uri, self.app_root)
        if not path.is_dir():
            raise ValidationError(f"注册表目录不存在: {path}")
