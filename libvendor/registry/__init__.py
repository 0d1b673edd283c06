"""注册表与依赖解析模块

拆分说明:
- base.py: Registry 抽象与协议枚举
- spec.py: 注册表清单与加载/获取缓存
- github.py / helm.py / fs.py: 三种协议实现
- locate.py: 按协议构造注册表、add / set_uri / update
- cache.py: 依赖解析后一次性写入 vendor 目录
- package_manager.py: 已安装包查询
- gc.py: 孤儿依赖回收
"""

from libvendor.registry.base import Registry, RegistryProtocol
from libvendor.registry.cache import cache_dependency
from libvendor.registry.gc import GarbageCollector, remove_empty_parents
from libvendor.registry.locate import Clients, add, locate, set_uri, update
from libvendor.registry.package_manager import PackageManager
from libvendor.registry.spec import Spec

__all__ = [
    "Registry",
    "RegistryProtocol",
    "Spec",
    "Clients",
    "locate",
    "add",
    "set_uri",
    "update",
    "cache_dependency",
    "PackageManager",
    "GarbageCollector",
    "remove_empty_parents",
]
