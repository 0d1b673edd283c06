"""依赖缓存：解析 → 内存缓冲 → 一次性提交到 vendor 目录

远端遍历全部成功之前不写任何文件，
网络中途失败时 vendor 目录与库列表都保持原样。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from libvendor.core.exceptions import NotFoundError, StateError, ValidationError
from libvendor.registry.locate import Clients, locate
from libvendor.utils.paths import ensure_within, validate_rel_segments
from libvendor.utils.txwriter import DEFAULT_DIR_MODE, TransactionWriter

if TYPE_CHECKING:
    from libvendor.core.models import LibraryRef
    from libvendor.core.protocols import AppProvider
    from libvendor.pkg.descriptor import Descriptor

logger = logging.getLogger(__name__)


def _rename_library_dir(vendor_rel: str, part: str, name: str) -> str:
    """自定义安装名时，把 <registry>/<part>/... 改写为 <registry>/<name>/..."""
    if name == part:
        return vendor_rel
    segments = vendor_rel.split("/")
    if len(segments) > 1 and segments[1] == part:
        segments[1] = name
    return "/".join(segments)


def commit_vendor_tree(
    vendor_root: str | Path, directories: list[str], files: dict[str, bytes],
) -> None:
    """把缓冲的目录与文件落到 vendor 目录

    先校验所有路径都在 vendor 根目录之内，再创建目录；
    文件全部写入临时文件后才逐个 rename，写入阶段失败不会留下任何目标文件。

    异常:
        ValidationError: 有路径跳出 vendor 根目录（此时磁盘不做任何改动）
    """
    root = Path(vendor_root)
    dir_paths = [ensure_within(root / rel, root) for rel in directories]
    file_paths = {rel: ensure_within(root / rel, root) for rel in files}

    for path in dir_paths:
        path.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)

    writers: list[TransactionWriter] = []
    try:
        for rel, content in files.items():
            tw = TransactionWriter(file_paths[rel])
            writers.append(tw)
            tw.write(content)
            tw.finish()
        for tw in writers:
            tw.commit()
            logger.debug("已 vendor: %s", tw.target_path)
    finally:
        for tw in writers:
            tw.abort()


def cache_dependency(
    app: AppProvider,
    d: Descriptor,
    custom_name: str = "",
    clients: Clients | None = None,
    force: bool = False,
) -> LibraryRef:
    """解析依赖并写入 vendor 目录与应用库列表

    force 为真时允许覆盖同名的已安装库，文件原地覆盖写入。

    异常:
        StateError: 安装名已被占用且未指定 force（在任何网络/磁盘操作之前检查）
        NotFoundError: 注册表不存在
        ValidationError: 自定义安装名无效，或文件路径跳出 vendor 目录
    """
    if custom_name:
        if "/" in custom_name:
            raise ValidationError(f"安装名 '{custom_name}' 不能包含 '/'")
        validate_rel_segments(custom_name, what="安装名")
    name = custom_name or d.part
    if name in app.libraries():
        if not force:
            raise StateError(f"库 '{name}' 已安装，请使用其他名称或 --force 覆盖")
        logger.info("覆盖已安装的库: %s", name)

    config = app.registries().get(d.registry)
    if config is None:
        raise NotFoundError(f"注册表 '{d.registry}' 不存在")
    registry = locate(app, config, clients)

    directories: list[str] = []
    files: dict[str, bytes] = {}

    def vendor_rel(rel: str) -> str:
        return _rename_library_dir(registry.cache_root(d.registry, rel), d.part, name)

    def on_dir(rel: str) -> None:
        directories.append(vendor_rel(rel))

    def on_file(rel: str, content: bytes) -> None:
        files[vendor_rel(rel)] = content

    logger.debug("缓存依赖: %s (name=%s)", d, name)
    _, ref = registry.resolve_library(d.part, custom_name, d.version, on_file, on_dir)
    # 以应用中已知的注册表名为准
    ref.registry = d.registry
    logger.info("已获取 %d 个文件 (%d 个目录): %s", len(files), len(directories), d)

    commit_vendor_tree(app.vendor_path(), directories, files)
    app.update_lib(ref.name, ref)
    return ref
