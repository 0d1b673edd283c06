"""GitHub 协议注册表

URI 支持三种形式:
    github.com/<org>/<repo>                               仓库根，master 分支
    github.com/<org>/<repo>/tree/<branch>/<path>          子目录 + 分支
    github.com/<org>/<repo>/blob/<branch>/<path>/registry.yaml

构造时把分支解析为提交 SHA 并固定，同一实例的所有读取都使用该 SHA。
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from libvendor.clients.github import GitHubClient, Repo
from libvendor.core.exceptions import FormatError, NotFoundError, StateError, ValidationError
from libvendor.core.models import LibraryRef, RegistryConfig
from libvendor.pkg.parts import PARTS_FILE, PartMetadata
from libvendor.registry.base import REGISTRY_FILE, DirCallback, FileCallback, Registry
from libvendor.registry.spec import Spec, load_or_fetch
from libvendor.utils.txwriter import write_file

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"

_HOST_PREFIXES = (
    "http://github.com", "https://github.com",
    "http://www.github.com", "https://www.github.com",
)
_BARE_PREFIXES = ("github.com", "www.github.com")


@dataclass(frozen=True)
class GitHubURI:
    """解析后的 GitHub 注册表地址"""

    org: str
    repo: str
    ref_spec: str
    spec_path: str

    @property
    def repo_sub_path(self) -> str:
        """库所在目录：清单文件的父目录（仓库根为空串）"""
        return posixpath.dirname(self.spec_path)


def parse_github_uri(uri: str) -> GitHubURI:
    """解析 GitHub 注册表 URI

    异常:
        ValidationError: 非 github.com 地址、带查询串或形状不受支持
    """
    uri = uri.strip()
    if uri.startswith(_HOST_PREFIXES):
        pass
    elif uri.startswith(_BARE_PREFIXES):
        uri = "http://" + uri
    else:
        raise ValidationError(
            f"github 协议的注册表 URI 必须以 github.com 开头"
            f"（可带 http/https/www 前缀）: {uri}"
        )

    parsed = urlsplit(uri)
    if parsed.query:
        raise ValidationError(f"注册表 URI 不允许带查询串: {uri}")

    components = parsed.path.split("/")
    # 路径以 "/" 开头，components[0] 恒为空
    if len(components) < 3 or not components[1] or not components[2]:
        raise ValidationError(f"GitHub URI 必须指向一个仓库: {uri}")
    org, repo = components[1], components[2]

    if len(components) == 3 or (len(components) == 4 and components[3] == ""):
        return GitHubURI(org=org, repo=repo, ref_spec=DEFAULT_BRANCH, spec_path=REGISTRY_FILE)

    if len(components) < 5 or not components[4]:
        raise ValidationError(_invalid_shape(uri))

    kind, ref_spec, rest = components[3], components[4], components[5:]
    if kind == "tree":
        if rest and rest[-1] == "":
            rest = rest[:-1]
        spec_path = "/".join(rest + [REGISTRY_FILE])
    elif kind == "blob" and rest and rest[-1] == REGISTRY_FILE:
        spec_path = "/".join(rest)
    else:
        raise ValidationError(_invalid_shape(uri))

    return GitHubURI(org=org, repo=repo, ref_spec=ref_spec, spec_path=spec_path)


def _invalid_shape(uri: str) -> str:
    return (
        f"无效的 GitHub URI: {uri}，应为 "
        "github.com/<org>/<repo>/tree/<branch>/[path] 形式"
    )


class GitHubRegistry(Registry):
    """基于 GitHub contents API 的注册表"""

    def __init__(
        self,
        config: RegistryConfig,
        cache_dir: str | Path,
        client: GitHubClient | None = None,
    ) -> None:
        super().__init__(config)
        self.parsed_uri = parse_github_uri(config.uri)
        self.repo = Repo(self.parsed_uri.org, self.parsed_uri.repo)
        self.cache_dir = Path(cache_dir)
        self.client = client or GitHubClient()
        if not self.config.pinned_version:
            self.config.pinned_version = self.client.commit_sha(
                self.repo, self.parsed_uri.ref_spec,
            )
            logger.debug("注册表 %s 固定到 %s", self.name, self.config.pinned_version)

    @property
    def pin(self) -> str:
        return self.config.pinned_version

    def spec_cache_path(self, pin: str = "") -> Path:
        return self.cache_dir / self.name / f"{pin or self.pin}.yaml"

    # ---- 清单 ----

    def _fetch_remote_spec(self, sha: str) -> Spec:
        entry, _ = self.client.contents(self.repo, self.parsed_uri.spec_path, sha)
        if entry is None or entry.content is None:
            raise NotFoundError(
                f"在 {self.repo}/{self.parsed_uri.spec_path}@{sha} 未找到有效的注册表清单"
            )
        spec = Spec.from_yaml(entry.content, source=self.parsed_uri.spec_path)
        spec.version = sha
        for lib in spec.libraries.values():
            if not lib.version:
                lib.version = sha
        return spec

    def fetch_registry_spec(self) -> Spec:
        return load_or_fetch(
            self.spec_cache_path(), lambda: self._fetch_remote_spec(self.pin),
        )

    # ---- 库解析 ----

    def _resolve_sha(self, version: str) -> str:
        if not version:
            return self.pin
        return self.client.commit_sha(self.repo, version)

    def _part_path(self, part: str) -> str:
        return posixpath.join(self.parsed_uri.repo_sub_path, part)

    def _fetch_part_metadata(self, part: str, sha: str) -> PartMetadata:
        path = posixpath.join(self._part_path(part), PARTS_FILE)
        entry, _ = self.client.contents(self.repo, path, sha)
        if entry is None or entry.content is None:
            raise NotFoundError(f"库 '{part}' 在 {self.repo}@{sha} 中不存在: {path}")
        return PartMetadata.from_yaml(entry.content, source=path)

    def resolve_library_spec(self, part: str, version: str = "") -> PartMetadata:
        return self._fetch_part_metadata(part, self._resolve_sha(version))

    def resolve_library(
        self,
        part: str,
        alias: str,
        version: str,
        on_file: FileCallback,
        on_dir: DirCallback | None = None,
    ) -> tuple[PartMetadata, LibraryRef]:
        sha = self._resolve_sha(version)
        self._walk(self._part_path(part), sha, on_file, on_dir)
        metadata = self._fetch_part_metadata(part, sha)
        ref = LibraryRef(name=alias or part, registry=self.name, version=sha)
        return metadata, ref

    def _walk(
        self, path: str, sha: str, on_file: FileCallback, on_dir: DirCallback | None,
    ) -> None:
        """深度优先遍历目录，文件内容读全后再回调"""
        _, entries = self.client.contents(self.repo, path, sha)
        if entries is None:
            raise NotFoundError(f"{self.repo}/{path}@{sha} 不是目录")
        for entry in entries:
            if entry.type == "file":
                file_entry, _ = self.client.contents(self.repo, entry.path, sha)
                if file_entry is None or file_entry.content is None:
                    raise FormatError(f"无法读取文件内容: {entry.path}")
                on_file(entry.path, file_entry.content)
            elif entry.type == "dir":
                if on_dir is not None:
                    on_dir(entry.path)
                self._walk(entry.path, sha, on_file, on_dir)
            elif entry.type in ("symlink", "submodule"):
                raise FormatError(f"不支持的条目类型 {entry.type}: {entry.path}")
            else:
                raise FormatError(f"未知的条目类型 {entry.type!r}: {entry.path}")

    # ---- 路径 / 更新 / 校验 ----

    def cache_root(self, registry_name: str, rel_path: str) -> str:
        rel = rel_path.lstrip("/")
        sub = self.parsed_uri.repo_sub_path
        if sub:
            prefix = sub.rstrip("/") + "/"
            if rel.startswith(prefix):
                rel = rel[len(prefix):]
        return posixpath.join(registry_name, rel)

    def update(self, version: str = "") -> str:
        """推进到分支最新提交；不支持固定到任意版本"""
        if version:
            raise StateError(
                f"注册表 {self.name} 不支持固定到指定版本 '{version}'，只能更新到最新"
            )
        old = self.pin
        new = self.client.commit_sha(self.repo, self.parsed_uri.ref_spec)
        if new == old:
            logger.info("注册表 %s 已是最新: %s", self.name, old)
            return old

        spec = self._fetch_remote_spec(new)
        write_file(self.spec_cache_path(new), spec.to_yaml())

        self.config.pinned_version = new
        if old:
            self.spec_cache_path(old).unlink(missing_ok=True)
        logger.info("注册表 %s 已更新: %s -> %s", self.name, old, new)
        return new

    def pin_version(self, version: str) -> None:
        """把分支、标签或 SHA 解析为提交 SHA 并固定"""
        self.config.pinned_version = self.client.commit_sha(self.repo, version)
        logger.info("注册表 %s 固定到 %s (%s)", self.name, self.pin, version)

    def validate_uri(self, uri: str) -> None:
        parsed = parse_github_uri(uri)
        self.client.validate_url(Repo(parsed.org, parsed.repo), parsed.ref_spec, parsed.spec_path)
