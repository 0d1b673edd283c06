"""依赖描述符 `<registry>/<part>@<version>`"""

from __future__ import annotations

import re
from dataclasses import dataclass

from libvendor.core.exceptions import ValidationError
from libvendor.utils.paths import validate_rel_segments

_DESCRIPTOR_RE = re.compile(r"^([A-Za-z0-9\-]+)(/[^@]+)?(@[^@]+)?$")


@dataclass(frozen=True)
class Descriptor:
    """依赖请求；version 为空表示最新"""

    registry: str = ""
    part: str = ""
    version: str = ""

    @classmethod
    def parse(cls, name: str) -> Descriptor:
        """解析 `[registry/]part[@version]`

        part 会拼进 vendor 路径，不允许绝对路径、空段和 "."/".." 段；
        version 可以是带 "/" 的分支名，但不能含 ".." 段。
        """
        m = _DESCRIPTOR_RE.match(name.strip())
        if m is None:
            raise ValidationError(
                f"包名 '{name}' 无效，格式应为 `<registry>/<library>@<version>`"
            )
        head, tail, ver = m.group(1), m.group(2), m.group(3)
        if tail:
            registry, part = head, tail[1:]
        else:
            registry, part = "", head
        version = (ver or "")[1:]

        validate_rel_segments(part, what=f"包名 '{name}' 中的库名")
        if version.startswith("/") or ".." in version.split("/"):
            raise ValidationError(f"包名 '{name}' 中的版本 '{version}' 无效")
        return cls(registry=registry, part=part, version=version)

    def __str__(self) -> str:
        out = f"{self.registry}/{self.part}" if self.registry else self.part
        if self.version:
            out = f"{out}@{self.version}"
        return out
