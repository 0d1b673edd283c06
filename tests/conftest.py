"""共享测试夹具：本地注册表目录、内存 tar.gz、假 GitHub 客户端"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Callable

import pytest

from libvendor.clients.github import ContentEntry, Repo
from libvendor.core.exceptions import TransportError

REGISTRY_YAML = """\
apiVersion: 0.1.0
kind: ksonnet.io/registry
libraries:
  apache:
    path: apache
    version: master
"""

PARTS_YAML = """\
name: apache
apiVersion: 0.0.1
kind: ksonnet.io/parts
description: part description
author: author
keywords: [apache, server, http]
license: Apache 2.0
"""

PROTOTYPE = """\
// @apiVersion 0.0.1
// @name io.ksonnet.pkg.apache-simple
// @description Deploys a simple apache server
// @shortDescription Apache server
// @param name string Name of the deployment
// @optionalParam replicas number 1 Number of replicas
local k = import 'k.libsonnet';
k.core.v1.list.new([])
"""

APACHE_FILES = {
    "apache/README.md": "# apache\n",
    "apache/apache.libsonnet": "{}\n",
    "apache/parts.yaml": PARTS_YAML,
    "apache/prototypes/apache-simple.jsonnet": PROTOTYPE,
}


@pytest.fixture()
def registry_dir(tmp_path: Path) -> Path:
    """磁盘上的本地注册表：registry.yaml + apache 库"""
    root = tmp_path / "parts"
    for rel, content in APACHE_FILES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    (root / "registry.yaml").write_text(REGISTRY_YAML, encoding="utf-8")
    return root


@pytest.fixture()
def make_tgz() -> Callable[[dict[str, bytes]], bytes]:
    """把 {归档内路径: 内容} 打包为 tar.gz 字节"""

    def _make(files: dict[str, bytes]) -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tf:
            for name, data in files.items():
                info = tarfile.TarInfo(name=name)
                info.size = len(data)
                tf.addfile(info, io.BytesIO(data))
        return buf.getvalue()

    return _make


class FakeGitHubClient:
    """内存中的 GitHub 仓库：{sha: {path: bytes}}，目录由文件路径推导"""

    def __init__(self, trees: dict[str, dict[str, bytes]], refs: dict[str, str]) -> None:
        self.trees = trees
        self.refs = refs
        self.calls: list[tuple[str, ...]] = []
        self.extra_entries: dict[str, list[ContentEntry]] = {}
        self.fail_after: int | None = None
        self.validated: list[tuple[Repo, str, str]] = []

    def commit_sha(self, repo: Repo, ref: str) -> str:
        self.calls.append(("commit_sha", ref))
        if ref not in self.refs:
            raise TransportError(f"unknown ref {ref}")
        return self.refs[ref]

    def contents(self, repo: Repo, path: str, ref: str):
        self.calls.append(("contents", path, ref))
        path = path.strip("/")
        files = self.trees[ref]
        if path in files:
            if self.fail_after is not None:
                if self.fail_after == 0:
                    raise TransportError(f"connection reset: {path}")
                self.fail_after -= 1
            return ContentEntry(type="file", path=path, name=path.rsplit("/", 1)[-1],
                                content=files[path]), None

        prefix = path + "/" if path else ""
        children: dict[str, str] = {}
        for fpath in files:
            if not fpath.startswith(prefix):
                continue
            head = fpath[len(prefix):].split("/", 1)
            child = prefix + head[0]
            children[child] = "dir" if len(head) > 1 else "file"
        if not children and path not in self.extra_entries:
            raise TransportError(f"404: {path}")
        entries = [
            ContentEntry(type=kind, path=p, name=p.rsplit("/", 1)[-1])
            for p, kind in sorted(children.items())
        ]
        entries.extend(self.extra_entries.get(path, []))
        return None, entries

    def validate_url(self, repo: Repo, ref: str, spec_path: str) -> None:
        self.validated.append((repo, ref, spec_path))


def github_tree(prefix: str = "incubator") -> dict[str, bytes]:
    """仓库内容：<prefix>/registry.yaml + <prefix>/apache/..."""
    base = f"{prefix}/" if prefix else ""
    tree = {f"{base}{rel}": content.encode("utf-8") for rel, content in APACHE_FILES.items()}
    tree[f"{base}registry.yaml"] = REGISTRY_YAML.encode("utf-8")
    return tree


@pytest.fixture()
def github_client() -> FakeGitHubClient:
    return FakeGitHubClient(
        trees={"sha1": github_tree(), "sha2": github_tree()},
        refs={"master": "sha1"},
    )
