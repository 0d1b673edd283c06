"""CLI — 注册表管理命令"""

from __future__ import annotations

import click

from libvendor.cli import _app
from libvendor.registry import RegistryProtocol, add, set_uri, update
from libvendor.registry.locate import locate_by_name


def register(group: click.Group) -> None:
    group.add_command(registry_group)


@click.group(name="registry")
def registry_group() -> None:
    """注册表管理"""


@registry_group.command(name="add")
@click.argument("name")
@click.argument("uri")
@click.option(
    "--protocol", default=RegistryProtocol.GITHUB.value,
    type=click.Choice([p.value for p in RegistryProtocol]),
)
@click.option("--override", is_flag=True, help="写入 registry_overrides 段")
@click.option("--version", default="", help="固定到的分支/标签/SHA（仅 github）")
def registry_add(name: str, uri: str, protocol: str, override: bool, version: str) -> None:
    """添加注册表并完成首次清单获取"""
    spec = add(_app(), protocol, name, uri, is_override=override, version=version)
    click.echo(f"注册表已添加: {name} ({protocol}) - {len(spec.libraries)} 个库")


@registry_group.command(name="list")
def registry_list() -> None:
    """列出已配置的注册表"""
    registries = _app().registries()
    if not registries:
        click.echo("没有已配置的注册表。")
        return
    for name in sorted(registries):
        r = registries[name]
        pin = f" @{r.pinned_version}" if r.pinned_version else ""
        click.echo(f"  {name:20s} [{r.protocol:6s}] {r.uri}{pin}")


@registry_group.command(name="describe")
@click.argument("name")
def registry_describe(name: str) -> None:
    """显示注册表详情与库清单"""
    registry = locate_by_name(_app(), name)
    spec = registry.fetch_registry_spec()
    click.echo(f"名称: {registry.name}")
    click.echo(f"协议: {registry.protocol}")
    click.echo(f"URI:  {registry.uri}")
    if spec.version:
        click.echo(f"版本: {spec.version}")
    click.echo("库:")
    for lib_name in sorted(spec.libraries):
        entry = spec.libraries[lib_name]
        ver = f"@{entry.version}" if entry.version else ""
        click.echo(f"  {lib_name}{ver}  ({entry.path})")


@registry_group.command(name="set")
@click.argument("name")
@click.option("--uri", required=True, help="新的注册表 URI")
def registry_set(name: str, uri: str) -> None:
    """修改注册表 URI"""
    if set_uri(_app(), name, uri):
        click.echo(f"注册表 {name} 的 URI 已更新为 {uri}")
    else:
        click.echo(f"注册表 {name} 的 URI 未变化")


@registry_group.command(name="update")
@click.argument("name")
@click.option("--version", default="", help="目标版本（仅支持留空，即更新到最新）")
def registry_update(name: str, version: str) -> None:
    """把注册表推进到最新版本"""
    new = update(_app(), name, version)
    if new:
        click.echo(f"注册表 {name} 已固定到 {new}")
    else:
        click.echo(f"注册表 {name} 没有可固定的版本")
