"""注册表工厂与注册表级操作

- locate:  按协议构造 Registry 实例
- add:     校验并登记新注册表，返回首次获取的清单
- set_uri: 修改注册表 URI 并刷新清单缓存
- update:  推进注册表固定版本并持久化
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from libvendor.clients.github import GitHubClient
from libvendor.clients.helm import CachingClient, HelmRepositoryClient
from libvendor.core.exceptions import ConfigError, NotFoundError, ValidationError
from libvendor.core.models import RegistryConfig
from libvendor.registry.base import Registry, RegistryProtocol
from libvendor.registry.fs import FsRegistry
from libvendor.registry.github import GitHubRegistry
from libvendor.registry.helm import HelmRegistry

if TYPE_CHECKING:
    from libvendor.core.protocols import AppProvider
    from libvendor.registry.spec import Spec

logger = logging.getLogger(__name__)


@dataclass
class Clients:
    """可注入的远端客户端（测试时替换为假实现）"""

    github: GitHubClient | None = None
    helm: Callable[[str], HelmRepositoryClient | CachingClient] | None = None


def _make_github(app: AppProvider, config: RegistryConfig, clients: Clients) -> Registry:
    client = clients.github or GitHubClient(
        api_url=app.config.github_api_url, raw_url=app.config.github_raw_url,
    )
    return GitHubRegistry(config, app.registry_cache_path(), client=client)


def _make_helm(app: AppProvider, config: RegistryConfig, clients: Clients) -> Registry:
    client = clients.helm(config.uri) if clients.helm else None
    return HelmRegistry(config, client=client)


def _make_fs(app: AppProvider, config: RegistryConfig, clients: Clients) -> Registry:
    return FsRegistry(config, app.root)


_FACTORIES: dict[str, Callable[[AppProvider, RegistryConfig, Clients], Registry]] = {
    RegistryProtocol.GITHUB: _make_github,
    RegistryProtocol.HELM: _make_helm,
    RegistryProtocol.FS: _make_fs,
}


def locate(
    app: AppProvider, config: RegistryConfig, clients: Clients | None = None,
) -> Registry:
    """根据协议构造注册表实例"""
    factory = _FACTORIES.get(config.protocol)
    if factory is None:
        raise ConfigError(f"无效的注册表协议 '{config.protocol}' (注册表 {config.name})")
    return factory(app, config, clients or Clients())


def locate_by_name(
    app: AppProvider, name: str, clients: Clients | None = None,
) -> Registry:
    config = app.registries().get(name)
    if config is None:
        raise NotFoundError(f"注册表 '{name}' 不存在")
    return locate(app, config, clients)


def add(
    app: AppProvider,
    protocol: str,
    name: str,
    uri: str,
    is_override: bool = False,
    clients: Clients | None = None,
    version: str = "",
) -> Spec:
    """登记新注册表

    先校验 URI 并完成首次清单获取，成功后才写入应用配置，
    失败时应用配置保持不变。version 非空时把注册表固定到该版本
    （只有 github 协议支持，分支/标签会被解析为提交 SHA）。
    """
    # 预填 version，避免构造时先去解析默认分支
    registry = locate(
        app,
        RegistryConfig(name=name, protocol=protocol, uri=uri, pinned_version=version),
        clients,
    )
    registry.validate_uri(uri)
    if version:
        registry.pin_version(version)
    spec = registry.fetch_registry_spec()
    app.add_registry(registry.make_registry_config(), is_override)
    logger.info("注册表 %s 已添加，包含 %d 个库", name, len(spec.libraries))
    return spec


def set_uri(
    app: AppProvider, name: str, uri: str, clients: Clients | None = None,
) -> bool:
    """修改注册表 URI

    新 URI 校验通过并成功获取清单后才写回应用配置；
    github 注册表按新 URI 的分支重新固定。URI 未变化时返回 False。
    """
    if not uri:
        raise ValidationError("注册表 URI 不能为空")
    current = app.registries().get(name)
    if current is None:
        raise NotFoundError(f"注册表 '{name}' 不存在")
    if current.uri == uri:
        logger.debug("注册表 %s 的 URI 未变化", name)
        return False

    registry = locate(
        app, RegistryConfig(name=name, protocol=current.protocol, uri=uri), clients,
    )
    registry.validate_uri(uri)
    registry.fetch_registry_spec()
    app.update_registry(registry.make_registry_config())
    logger.info("注册表 %s 的 URI 已更新: %s -> %s", name, current.uri, uri)
    return True


def update(
    app: AppProvider, name: str, version: str = "", clients: Clients | None = None,
) -> str:
    """推进注册表到最新版本，固定版本变化时写回应用配置"""
    registry = locate_by_name(app, name, clients)
    old = registry.config.pinned_version
    new = registry.update(version)
    if new and new != old:
        app.update_registry(registry.make_registry_config())
    return new
