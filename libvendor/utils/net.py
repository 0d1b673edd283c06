"""网络工具 — URL 校验与阻塞式 HTTP 读取

所有远程访问都经过这里：不设超时、不重试，失败统一转换为 TransportError。
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from urllib.parse import urlparse

from libvendor.core.exceptions import TransportError, ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https 且带主机名

    Raises:
        ValidationError: scheme 不在白名单内或缺少主机
    """
    parsed = urlparse(url)
    label = f" ({context})" if context else ""
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )
    if not parsed.netloc:
        raise ValidationError(f"URL 缺少主机名{label}: {url}")


def http_get(url: str, headers: dict[str, str] | None = None) -> bytes:
    """GET 并读取完整响应体"""
    req = urllib.request.Request(url, headers=headers or {})
    logger.debug("GET %s", url)
    try:
        with urllib.request.urlopen(req) as resp:  # nosec B310
            status = getattr(resp, "status", 200)
            if status != 200:
                raise TransportError(f"请求 {url} 返回状态码 {status}，期望 200")
            body: bytes = resp.read()
            return body
    except urllib.error.HTTPError as e:
        raise TransportError(f"请求 {url} 返回状态码 {e.code}，期望 200") from e
    except (urllib.error.URLError, OSError) as e:
        raise TransportError(f"请求失败: {url} - {e}") from e


def http_head(url: str, headers: dict[str, str] | None = None) -> int:
    """HEAD 请求，返回状态码（HTTP 错误码原样返回，仅连接失败抛异常）"""
    req = urllib.request.Request(url, headers=headers or {}, method="HEAD")
    logger.debug("HEAD %s", url)
    try:
        with urllib.request.urlopen(req) as resp:  # nosec B310
            return int(getattr(resp, "status", 200))
    except urllib.error.HTTPError as e:
        return int(e.code)
    except (urllib.error.URLError, OSError) as e:
        raise TransportError(f"请求失败: {url} - {e}") from e
