"""核心数据模型

注册表配置与已安装库引用，是应用配置文件中持久化的两类记录。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RegistryConfig:
    """注册表配置：协议决定由哪个 Registry 实现负责

    update 只推进 pinned_version；URI 只通过 set_uri 整体替换。
    """

    name: str
    protocol: str
    uri: str
    pinned_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"protocol": self.protocol, "uri": self.uri}
        if self.pinned_version:
            entry["pinnedVersion"] = self.pinned_version
        return entry

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> RegistryConfig:
        return cls(
            name=name,
            protocol=str(data.get("protocol", "")),
            uri=str(data.get("uri", "")),
            pinned_version=str(data.get("pinnedVersion", "") or ""),
        )


@dataclass
class LibraryRef:
    """已安装库引用：每个安装名恰好一条"""

    name: str
    registry: str
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"registry": self.registry}
        if self.version:
            entry["version"] = self.version
        return entry

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> LibraryRef:
        return cls(
            name=name,
            registry=str(data.get("registry", "")),
            version=str(data.get("version", "") or ""),
        )

    def __str__(self) -> str:
        if self.version:
            return f"{self.registry}/{self.name}@{self.version}"
        return f"{self.registry}/{self.name}"
