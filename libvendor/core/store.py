"""YAML 文件存储基类

应用配置文件按 section 组织（registries / registry_overrides / libraries），
子类共享加载、保存和按 section 增删改查逻辑。每次修改立即落盘。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from libvendor.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)


class YamlStore:
    """YAML 文件存储基类

    子类用法:
        class MyStore(YamlStore):
            section_key = "items"
    """

    section_key: str = "entries"

    def __init__(self, store_file: str | Path) -> None:
        self.store_file = Path(store_file)
        self._data: dict[str, Any] = load_yaml(self.store_file)

    def _section(self, key: str = "") -> dict[str, dict[str, Any]]:
        """获取 section 字典（自动创建）"""
        section = self._data.setdefault(key or self.section_key, {})
        if section is None:
            section = self._data[key or self.section_key] = {}
        result: dict[str, dict[str, Any]] = section
        return result

    def _save(self) -> None:
        save_yaml(self.store_file, self._data)

    def _put(self, name: str, entry: dict[str, Any], key: str = "") -> dict[str, Any]:
        """写入条目并保存"""
        self._section(key)[name] = entry
        self._save()
        return entry

    def _get_raw(self, name: str, key: str = "") -> dict[str, Any] | None:
        return self._section(key).get(name)

    def _list_raw(self, key: str = "") -> list[dict[str, Any]]:
        """列出所有条目（带 name 字段）"""
        return [{"name": k, **(v or {})} for k, v in self._section(key).items()]

    def _remove(self, name: str, key: str = "") -> bool:
        section = self._section(key)
        if name not in section:
            return False
        del section[name]
        self._save()
        return True
