"""集中配置管理

提供 vendor 目录、注册表缓存目录、GitHub 端点等配置项。
支持从 YAML 文件加载 + 编程式覆盖；组件通过构造参数拿到配置，
不在内部隐式读取全局单例。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

from libvendor.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """全局配置"""

    # 目录（相对于应用根目录）
    app_file: str = "app.yaml"
    vendor_dir: str = "vendor"
    registry_cache_dir: str = ".libvendor/registries"

    # GitHub 端点
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "libvendor.yaml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "libvendor.yaml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
