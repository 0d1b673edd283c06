"""libvendor 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
业务异常统一转换为 click.ClickException 输出。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from libvendor import __version__
from libvendor.core.app import App
from libvendor.core.config import get_config, init_config
from libvendor.core.exceptions import LibVendorError
from libvendor.utils.logger import setup_logging_from_env

_state: dict[str, Any] = {"app_dir": "."}


def _app() -> App:
    """按全局选项构造应用配置"""
    return App(Path(_state["app_dir"]), get_config())


class LibVendorGroup(click.Group):
    """把 LibVendorError 转为友好的命令行错误"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except LibVendorError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e


@click.group(cls=LibVendorGroup)
@click.version_option(version=__version__)
@click.option("--app-dir", default=".", help="应用根目录（包含 app.yaml）")
@click.option("--config", "config_path", default="libvendor.yaml", help="全局配置文件")
def main(app_dir: str, config_path: str) -> None:
    """libvendor - 依赖解析与 vendor 工具"""
    setup_logging_from_env()
    init_config(config_path)
    _state["app_dir"] = app_dir


# 注册各领域子命令
from libvendor.cli.cmd_registry import register as _reg_registry  # noqa: E402
from libvendor.cli.cmd_pkg import register as _reg_pkg  # noqa: E402

_reg_registry(main)
_reg_pkg(main)
