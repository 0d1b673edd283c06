"""包管理器

把应用中已安装的库引用映射为 Package 视图，
并为垃圾回收器提供安装检查与 vendor 路径解析。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from libvendor.core.exceptions import ConfigError, NotFoundError
from libvendor.pkg.descriptor import Descriptor
from libvendor.pkg.package import (
    HelmPackage,
    LocalPackage,
    Package,
    RemotePackage,
    chart_versions_dir,
    library_dir,
)
from libvendor.pkg.prototype import Prototype, latest_by_name
from libvendor.registry.base import RegistryProtocol
from libvendor.registry.locate import Clients, locate

if TYPE_CHECKING:
    from libvendor.core.models import RegistryConfig
    from libvendor.core.protocols import AppProvider

logger = logging.getLogger(__name__)


class PackageManager:
    """已安装包的查询入口"""

    def __init__(self, app: AppProvider, clients: Clients | None = None) -> None:
        self.app = app
        self.clients = clients

    def find(self, name: str) -> Package:
        """按 `[registry/]part[@version]` 查找包

        已安装的包从本地 vendor 目录读取（使用已安装的版本，不访问网络）；
        未安装的包只解析远端元数据，返回只读的 RemotePackage。
        """
        d = Descriptor.parse(name)
        if not d.registry:
            for p in self.packages():
                if p.name == d.part:
                    return p
            raise NotFoundError(f"包 '{name}' 不存在")

        config = self.app.registries().get(d.registry)
        if config is None:
            raise NotFoundError(f"注册表 '{d.registry}' 不存在")

        installed = self.app.libraries().get(d.part)
        if installed is not None and installed.registry == d.registry:
            return self._load_package(config, d.part, installed.version)

        registry = locate(self.app, config, self.clients)
        metadata = registry.resolve_library_spec(d.part, d.version)
        return RemotePackage(d.registry, metadata)

    def packages(self) -> list[Package]:
        """所有已安装的包，按名称排序"""
        registries = self.app.registries()
        result: list[Package] = []
        for name, ref in sorted(self.app.libraries().items()):
            config = registries.get(ref.registry)
            if config is None:
                raise ConfigError(
                    f"库 '{name}' 引用的注册表 '{ref.registry}' 未在配置中定义"
                )
            result.append(self._load_package(config, name, ref.version))
        return result

    def prototypes(self) -> list[Prototype]:
        """汇总所有已安装包暴露的原型，同名只保留最高版本"""
        collected: list[Prototype] = []
        for p in self.packages():
            collected.extend(p.prototypes())
        return latest_by_name(collected)

    def _load_package(self, config: RegistryConfig, name: str, version: str) -> Package:
        vendor_root = self.app.vendor_path()
        if config.protocol == RegistryProtocol.HELM:
            return HelmPackage(vendor_root, name, config.name, version, checker=self)
        if config.protocol in (RegistryProtocol.GITHUB, RegistryProtocol.FS):
            return LocalPackage(vendor_root, name, config.name, version, checker=self)
        raise ConfigError(
            f"包 {config.name}/{name} 所在注册表使用了未知协议 '{config.protocol}'"
        )

    # ---- InstalledChecker / VendorPathResolver ----

    def is_installed(self, d: Descriptor) -> bool:
        ref = self.app.libraries().get(d.part)
        if ref is None:
            return False
        if d.registry and ref.registry != d.registry:
            return False
        if d.version and ref.version != d.version:
            return False
        return True

    def vendor_path(self, d: Descriptor) -> str:
        """依赖在 vendor 目录中的根路径；注册表未知时返回空串"""
        config = self.app.registries().get(d.registry)
        if config is None:
            return ""
        vendor_root = Path(self.app.vendor_path())
        if config.protocol == RegistryProtocol.HELM:
            base = chart_versions_dir(vendor_root, d.registry, d.part)
            if d.version:
                return str(base / d.version)
            return str(base.parent)
        return str(library_dir(vendor_root, d.registry, d.part))
