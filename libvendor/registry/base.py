"""注册表抽象 - Strategy Pattern

职责:
- 定义注册表公共接口（身份、清单、库解析、路径映射、更新、URI 校验）
- 各协议实现只在自己的类里处理 URI / 版本语义，
  包管理器与垃圾回收器从不按协议分支

协议:
- github: 源码托管 API，目录树 + 提交 SHA 固定
- helm:   chart 仓库 index.yaml + 语义版本
- fs:     本地目录，用于开发调试
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Callable

from libvendor.core.exceptions import StateError
from libvendor.core.models import RegistryConfig

if TYPE_CHECKING:
    from libvendor.core.models import LibraryRef
    from libvendor.pkg.parts import PartMetadata
    from libvendor.registry.spec import Spec

REGISTRY_FILE = "registry.yaml"

# on_file(rel_path, contents) / on_dir(rel_path)
FileCallback = Callable[[str, bytes], None]
DirCallback = Callable[[str], None]


class RegistryProtocol(str, Enum):
    """注册表协议"""
    GITHUB = "github"
    HELM = "helm"
    FS = "fs"


class Registry(ABC):
    """注册表公共接口"""

    def __init__(self, config: RegistryConfig) -> None:
        self.config = config

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def protocol(self) -> str:
        return self.config.protocol

    @property
    def uri(self) -> str:
        return self.config.uri

    @abstractmethod
    def fetch_registry_spec(self) -> Spec:
        """获取注册表清单"""

    @abstractmethod
    def resolve_library_spec(self, part: str, version: str = "") -> PartMetadata:
        """只获取单个库的元数据，不拉取文件"""

    @abstractmethod
    def resolve_library(
        self,
        part: str,
        alias: str,
        version: str,
        on_file: FileCallback,
        on_dir: DirCallback | None = None,
    ) -> tuple[PartMetadata, LibraryRef]:
        """遍历库的文件树，逐个回调目录与文件，返回元数据与固定版本的库引用"""

    @abstractmethod
    def cache_root(self, registry_name: str, rel_path: str) -> str:
        """把协议原生路径映射为 vendor 相对路径"""

    @abstractmethod
    def update(self, version: str = "") -> str:
        """推进到最新版本，返回新的固定版本"""

    @abstractmethod
    def validate_uri(self, uri: str) -> None:
        """校验 URI 可用，不可用时抛异常"""

    def pin_version(self, version: str) -> None:
        """把注册表固定到指定版本；默认协议没有可固定的版本"""
        raise StateError(f"注册表 {self.name} 的协议 {self.protocol} 不支持固定版本 '{version}'")

    def make_registry_config(self) -> RegistryConfig:
        """生成要写入应用配置的注册表记录"""
        return RegistryConfig(
            name=self.config.name,
            protocol=self.config.protocol,
            uri=self.config.uri,
            pinned_version=self.config.pinned_version,
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.protocol}) {self.uri}"
