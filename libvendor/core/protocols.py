"""领域协议定义

解析引擎只通过这些窄接口消费外部应用层，
使用 typing.Protocol，测试可直接注入假实现。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from libvendor.core.config import Config
    from libvendor.core.models import LibraryRef, RegistryConfig
    from libvendor.pkg.descriptor import Descriptor


class AppProvider(Protocol):
    """应用能力面：路径根、注册表配置、已安装库列表及其持久化"""

    config: Config

    @property
    def root(self) -> Path:
        ...

    def vendor_path(self) -> Path:
        ...

    def registry_cache_path(self) -> Path:
        ...

    def registries(self) -> dict[str, RegistryConfig]:
        ...

    def libraries(self) -> dict[str, LibraryRef]:
        ...

    def add_registry(self, config: RegistryConfig, is_override: bool = False) -> None:
        ...

    def update_registry(self, config: RegistryConfig) -> None:
        ...

    def update_lib(self, name: str, ref: LibraryRef | None) -> None:
        ...


class InstalledChecker(Protocol):
    """安装状态检查（由应用的库列表支撑）"""

    def is_installed(self, d: Descriptor) -> bool:
        ...


class VendorPathResolver(InstalledChecker, Protocol):
    """垃圾回收需要的能力：安装检查 + vendor 路径解析"""

    def vendor_path(self, d: Descriptor) -> str:
        ...
