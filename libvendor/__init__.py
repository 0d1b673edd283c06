"""libvendor - 库依赖解析与本地 vendor 缓存引擎"""

__version__ = "0.3.0"
