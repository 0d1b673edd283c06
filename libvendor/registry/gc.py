"""垃圾回收：删除不再被引用的 vendor 子树并清理空的上级目录"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from libvendor.utils.paths import ensure_within

if TYPE_CHECKING:
    from libvendor.core.protocols import VendorPathResolver
    from libvendor.pkg.descriptor import Descriptor

logger = logging.getLogger(__name__)


def remove_empty_parents(path: str | Path, root: str | Path) -> None:
    """从 path 的父目录开始向上删除空目录

    只处理严格位于 root 之内的目录，root 本身永不删除；
    遇到第一个非空目录或非目录即停止。
    """
    root_path = Path(os.path.abspath(root))
    current = Path(os.path.abspath(path)).parent
    while current != root_path and root_path in current.parents:
        if not current.is_dir() or current.is_symlink():
            break
        if any(current.iterdir()):
            break
        current.rmdir()
        logger.debug("已删除空目录: %s", current)
        current = current.parent


class GarbageCollector:
    """按描述符回收孤儿依赖"""

    def __init__(self, resolver: VendorPathResolver, root: str | Path) -> None:
        self.resolver = resolver
        self.root = Path(root)

    def remove_orphans(self, d: Descriptor) -> None:
        """依赖仍被引用时不做任何事；路径不存在不算错误

        异常:
            ValidationError: 解析出的路径不在 vendor 根目录之内
        """
        if self.resolver.is_installed(d):
            return

        path = self.resolver.vendor_path(d)
        if not path:
            return

        target = ensure_within(path, self.root)

        if target.is_dir() and not target.is_symlink():
            logger.debug("删除 vendor 目录: %s", target)
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            logger.debug("删除 vendor 文件: %s", target)
            target.unlink()

        try:
            remove_empty_parents(target, self.root)
        except OSError as e:
            logger.warning("清理空目录失败 (%s): %s", target, e)
