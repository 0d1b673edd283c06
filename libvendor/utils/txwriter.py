"""事务式文件写入器

先写同一文件系统上的临时文件，提交时再创建目标目录并原子 rename；
失败或放弃时删除临时文件。commit / abort 均幂等，
commit 之后再调用 abort 不会影响已落盘的目标文件。

用法:
    with TransactionWriter(path) as tw:
        tw.write(data)
    # 正常退出自动 commit，异常退出自动 abort
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".lvtmp-"
DEFAULT_DIR_MODE = 0o755


def _nearest_existing_dir(path: Path) -> Path:
    """向上查找第一个已存在的目录，作为临时文件的落点（保证同一文件系统）"""
    current = path.parent
    while not current.is_dir():
        if current.parent == current:
            break
        current = current.parent
    return current


class TransactionWriter:
    """写临时文件 + 原子 rename 的单文件写入器"""

    def __init__(self, path: str | Path) -> None:
        self.target_path = Path(path)
        tmp_dir = _nearest_existing_dir(self.target_path)
        fd, tmp = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=str(tmp_dir))
        self._file = os.fdopen(fd, "wb")
        self.tmp_path: Path | None = Path(tmp)
        self.committed = False

    def write(self, data: bytes) -> int:
        if self.tmp_path is None or self._file.closed:
            raise ValueError(f"写入器已关闭: {self.target_path}")
        return self._file.write(data)

    def finish(self) -> None:
        """写完：刷盘并关闭临时文件，只保留临时路径等待 commit

        批量提交时每个写入器写完即调用，避免同时占用大量文件描述符。
        """
        if self.tmp_path is None or self._file.closed:
            return
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
        except OSError:
            self.abort()
            raise

    @property
    def closed(self) -> bool:
        """临时文件句柄是否已释放"""
        return self._file.closed

    def abort(self) -> None:
        """放弃写入并删除临时文件（可重复调用）"""
        if not self._file.closed:
            self._file.close()
        if self.tmp_path is None:
            return
        tmp, self.tmp_path = self.tmp_path, None
        tmp.unlink(missing_ok=True)

    def commit(self) -> None:
        """落盘：关闭临时文件 → 创建目标目录 → rename（可重复调用）"""
        if self.tmp_path is None:
            return
        self.finish()
        try:
            self.target_path.parent.mkdir(
                mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True,
            )
            os.replace(self.tmp_path, self.target_path)
        except OSError:
            self.abort()
            raise
        self.tmp_path = None
        self.committed = True
        logger.debug("已写入: %s", self.target_path)

    def __enter__(self) -> TransactionWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.abort()


def write_file(path: str | Path, data: bytes) -> None:
    """以事务方式写入完整内容"""
    with TransactionWriter(path) as tw:
        tw.write(data)
