"""tar.gz 归档流式读取

只把普通文件交给回调，目录、链接、设备等条目直接忽略。
"""

from __future__ import annotations

import io
import logging
import tarfile
from typing import Callable

from libvendor.core.exceptions import FormatError

logger = logging.getLogger(__name__)

FileHandler = Callable[[str, bytes], None]


def unarchive_tgz(data: bytes, handler: FileHandler) -> int:
    """解压 gzip 压缩的 tar 数据，按归档顺序回调每个普通文件

    返回:
        int: 回调的文件数
    """
    count = 0
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tf:
            for member in tf:
                if not member.isreg():
                    continue
                extracted = tf.extractfile(member)
                if extracted is None:
                    continue
                handler(member.name, extracted.read())
                count += 1
    except (tarfile.TarError, EOFError, OSError) as e:
        raise FormatError(f"无法解压 tar.gz 归档: {e}") from e
    logger.debug("归档中共 %d 个文件", count)
    return count
