"""GitHub REST 客户端

只实现注册表需要的三个调用：
- commit_sha(repo, ref):       分支/标签 → 提交 SHA
- contents(repo, path, ref):   目录列表或单个文件内容
- validate_url(url):           HEAD 校验 registry.yaml 可达

设置 GITHUB_TOKEN 环境变量后以 Bearer 方式认证。
"""

from __future__ import annotations

import base64
import json
import logging
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from libvendor.core.exceptions import FormatError, TransportError
from libvendor.utils.net import http_get, http_head, validate_url_scheme

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
TOKEN_ENV = "GITHUB_TOKEN"


@dataclass(frozen=True)
class Repo:
    org: str
    repo: str

    def __str__(self) -> str:
        return f"{self.org}/{self.repo}"


@dataclass
class ContentEntry:
    """contents API 返回的单个条目"""

    type: str  # "file", "dir", "symlink", "submodule"
    path: str
    name: str = ""
    content: bytes | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ContentEntry:
        content = None
        raw = data.get("content")
        if raw is not None and data.get("encoding", "base64") == "base64":
            try:
                content = base64.b64decode(raw)
            except ValueError as e:
                raise FormatError(f"无法解码文件内容: {data.get('path')}") from e
        return cls(
            type=str(data.get("type", "")),
            path=str(data.get("path", "")),
            name=str(data.get("name", "")),
            content=content,
        )


class GitHubClient:
    """基于 urllib 的阻塞式客户端"""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        raw_url: str = DEFAULT_RAW_URL,
        token: str | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.token = token if token is not None else os.getenv(TOKEN_ENV, "")

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        headers = {"Accept": accept, "User-Agent": "libvendor"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def commit_sha(self, repo: Repo, ref: str) -> str:
        """解析 ref 当前指向的提交 SHA"""
        ref = ref or "master"
        logger.debug("github: 解析 %s@%s 的 SHA", repo, ref)
        url = f"{self.api_url}/repos/{repo.org}/{repo.repo}/commits/{quote(ref, safe='')}"
        body = http_get(url, self._headers("application/vnd.github.sha"))
        sha = body.decode("utf-8").strip()
        if not sha:
            raise TransportError(f"未能解析 {repo}@{ref} 的提交 SHA")
        return sha

    def contents(
        self, repo: Repo, path: str, ref: str,
    ) -> tuple[ContentEntry | None, list[ContentEntry] | None]:
        """获取路径内容：文件返回 (entry, None)，目录返回 (None, entries)"""
        logger.debug("github: 获取 %s/%s@%s", repo, path, ref)
        url = (
            f"{self.api_url}/repos/{repo.org}/{repo.repo}/contents/"
            f"{quote(path.strip('/'))}?ref={quote(ref, safe='')}"
        )
        body = http_get(url, self._headers())
        try:
            data = json.loads(body)
        except ValueError as e:
            raise FormatError(f"无法解析 contents 响应: {url}") from e
        if isinstance(data, list):
            return None, [ContentEntry.from_api(d) for d in data]
        if isinstance(data, dict):
            return ContentEntry.from_api(data), None
        raise FormatError(f"contents 响应格式异常: {url}")

    def validate_url(self, repo: Repo, ref: str, spec_path: str) -> None:
        """HEAD 请求 raw 地址，确认 registry.yaml 可达"""
        url = f"{self.raw_url}/{repo.org}/{repo.repo}/{ref}/{spec_path}"
        validate_url_scheme(url, context="github registry")
        status = http_head(url, self._headers("*/*"))
        if status != 200:
            raise TransportError(f"{url} 返回 {status}，期望 200")
