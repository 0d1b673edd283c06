"""统一异常体系

所有业务异常继承 LibVendorError，按错误类别细分：
配置、URI 校验、未找到、传输、格式、状态冲突。
CLI 层据此输出友好提示，各层只做包装不做重试。
"""

from __future__ import annotations


class LibVendorError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(LibVendorError):
    """配置缺失或无效（非法协议、库引用的注册表不存在等）"""

    code = "CONFIG_ERROR"


class ValidationError(LibVendorError, ValueError):
    """输入校验失败（URI 无法解析、带查询串、协议不允许等）"""

    code = "VALIDATION_ERROR"


class NotFoundError(LibVendorError):
    """注册表 / 库 / 版本不存在"""

    code = "NOT_FOUND"


class TransportError(LibVendorError):
    """网络失败或非 200 响应"""

    code = "TRANSPORT_ERROR"


class FormatError(LibVendorError):
    """内容无法解码或包含不支持的条目"""

    code = "FORMAT_ERROR"


class StateError(LibVendorError):
    """状态冲突（重复安装、固定到任意版本等）"""

    code = "STATE_ERROR"
