"""CLI — 包与原型命令"""

from __future__ import annotations

import click

from libvendor.cli import _app
from libvendor.core.exceptions import NotFoundError
from libvendor.pkg.descriptor import Descriptor
from libvendor.pkg.prototype import find_by_suffix, search_names
from libvendor.registry import GarbageCollector, PackageManager, cache_dependency


def register(group: click.Group) -> None:
    group.add_command(pkg_group)
    group.add_command(prototype_group)


@click.group(name="pkg")
def pkg_group() -> None:
    """依赖包管理"""


@pkg_group.command(name="install")
@click.argument("name")
@click.option("--as", "custom_name", default="", help="自定义安装名")
@click.option("--force", is_flag=True, help="覆盖同名的已安装库")
def pkg_install(name: str, custom_name: str, force: bool) -> None:
    """安装依赖到 vendor 目录，格式 <registry>/<library>[@<version>]"""
    d = Descriptor.parse(name)
    if not d.registry:
        raise click.UsageError("安装时必须指定注册表: <registry>/<library>[@<version>]")
    ref = cache_dependency(_app(), d, custom_name, force=force)
    click.echo(f"已安装: {ref}")


@pkg_group.command(name="remove")
@click.argument("name")
def pkg_remove(name: str) -> None:
    """移除已安装的依赖并回收 vendor 目录"""
    app = _app()
    d = Descriptor.parse(name)
    ref = app.libraries().get(d.part)
    if ref is None:
        raise NotFoundError(f"库 '{d.part}' 未安装")
    app.update_lib(d.part, None)
    gc = GarbageCollector(PackageManager(app), app.vendor_path())
    gc.remove_orphans(Descriptor(registry=ref.registry, part=d.part, version=ref.version))
    click.echo(f"已移除: {ref}")


@pkg_group.command(name="list")
def pkg_list() -> None:
    """列出已安装的依赖"""
    packages = PackageManager(_app()).packages()
    if not packages:
        click.echo("没有已安装的依赖。")
        return
    for p in packages:
        click.echo(f"  {p.registry_name:15s} {p.name:20s} {p.version:12s} {p.description}")


@pkg_group.command(name="describe")
@click.argument("name")
def pkg_describe(name: str) -> None:
    """显示包详情（已安装包含原型列表）"""
    p = PackageManager(_app()).find(name)
    click.echo(f"名称:   {p.name}")
    click.echo(f"注册表: {p.registry_name}")
    if p.version:
        click.echo(f"版本:   {p.version}")
    click.echo(f"已安装: {'是' if p.is_installed() else '否'}")
    if p.description:
        click.echo(f"描述:   {p.description}")
    protos = p.prototypes()
    if protos:
        click.echo("原型:")
        for proto in protos:
            click.echo(f"  {proto.name}  {proto.short_description}")


@click.group(name="prototype")
def prototype_group() -> None:
    """原型查询"""


@prototype_group.command(name="list")
def prototype_list() -> None:
    """列出所有已安装包暴露的原型"""
    protos = PackageManager(_app()).prototypes()
    if not protos:
        click.echo("没有可用的原型。")
        return
    for proto in protos:
        click.echo(f"  {proto.name:45s} {proto.short_description}")


@prototype_group.command(name="search")
@click.argument("query")
def prototype_search(query: str) -> None:
    """按名称子串搜索原型"""
    protos = search_names(query, PackageManager(_app()).prototypes())
    if not protos:
        raise NotFoundError(f"没有与 '{query}' 匹配的原型")
    for proto in protos:
        click.echo(f"  {proto.name:45s} {proto.short_description}")


@prototype_group.command(name="describe")
@click.argument("name")
def prototype_describe(name: str) -> None:
    """显示原型详情，名称可只写后缀"""
    proto = find_by_suffix(name, PackageManager(_app()).prototypes())
    click.echo(f"名称:   {proto.name}")
    if proto.version:
        click.echo(f"版本:   {proto.version}")
    click.echo(f"描述:   {proto.description}")
    required = proto.required_params()
    if required:
        click.echo("必填参数:")
        for p in required:
            click.echo(f"  --{p.name} ({p.type})  {p.description}")
    optional = proto.optional_params()
    if optional:
        click.echo("可选参数:")
        for p in optional:
            click.echo(f"  --{p.name} ({p.type}, 默认 {p.default})  {p.description}")
