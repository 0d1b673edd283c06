"""基于 YAML 的应用配置

app.yaml 结构:
    registries:
      incubator: {protocol: github, uri: ..., pinnedVersion: <sha>}
    registry_overrides:
      incubator: {protocol: fs, uri: ../parts}
    libraries:
      apache: {registry: incubator, version: <sha>}
"""

from __future__ import annotations

import logging
from pathlib import Path

from libvendor.core.config import Config
from libvendor.core.exceptions import StateError
from libvendor.core.models import LibraryRef, RegistryConfig
from libvendor.core.store import YamlStore

logger = logging.getLogger(__name__)

REGISTRIES = "registries"
OVERRIDES = "registry_overrides"
LIBRARIES = "libraries"


class App(YamlStore):
    """应用配置（App 协议的 YAML 实现）"""

    section_key = LIBRARIES

    def __init__(self, root: str | Path, config: Config | None = None) -> None:
        self._root = Path(root)
        self.config = config or Config()
        super().__init__(self._root / self.config.app_file)

    @property
    def root(self) -> Path:
        return self._root

    def vendor_path(self) -> Path:
        return self._root / self.config.vendor_dir

    def registry_cache_path(self) -> Path:
        return self._root / self.config.registry_cache_dir

    def registries(self) -> dict[str, RegistryConfig]:
        """合并后的注册表配置，override 优先"""
        merged: dict[str, RegistryConfig] = {}
        for key in (REGISTRIES, OVERRIDES):
            for name, entry in self._section(key).items():
                merged[name] = RegistryConfig.from_dict(name, entry or {})
        return merged

    def libraries(self) -> dict[str, LibraryRef]:
        return {
            name: LibraryRef.from_dict(name, entry or {})
            for name, entry in self._section(LIBRARIES).items()
        }

    def add_registry(self, config: RegistryConfig, is_override: bool = False) -> None:
        key = OVERRIDES if is_override else REGISTRIES
        if self._get_raw(config.name, key) is not None:
            raise StateError(f"注册表 '{config.name}' 已存在")
        self._put(config.name, config.to_dict(), key)
        logger.info("注册表已添加: %s (protocol=%s)", config.name, config.protocol)

    def update_registry(self, config: RegistryConfig) -> None:
        """持久化注册表配置变更（固定版本推进或 URI 修改）"""
        key = OVERRIDES if self._get_raw(config.name, OVERRIDES) is not None else REGISTRIES
        self._put(config.name, config.to_dict(), key)
        logger.info("注册表已更新: %s -> %s", config.name, config.pinned_version)

    def update_lib(self, name: str, ref: LibraryRef | None) -> None:
        """写入或删除（ref 为 None）库引用"""
        if ref is None:
            if self._remove(name, LIBRARIES):
                logger.info("库已移除: %s", name)
            return
        self._put(name, ref.to_dict(), LIBRARIES)
        logger.info("库已记录: %s -> %s", name, ref)
