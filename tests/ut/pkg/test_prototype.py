"""原型头部标签解析测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from libvendor.core.exceptions import FormatError, NotFoundError, ValidationError
from libvendor.pkg.prototype import (
    Prototype,
    find_by_suffix,
    latest_by_name,
    load_prototypes,
    parse_prototype,
    search_names,
)

SOURCE = """\
// @apiVersion 0.1.0
// @name io.ksonnet.pkg.redis
// @description Redis deployment
// @shortDescription Redis
// @param name string Name of the component
// @optionalParam replicas number 1 How many replicas
// a plain comment
local k = import 'k.libsonnet';
{}
"""


class TestParsePrototype:
    def test_tags(self) -> None:
        proto = parse_prototype(SOURCE, version="sha1")
        assert proto.name == "io.ksonnet.pkg.redis"
        assert proto.api_version == "0.1.0"
        assert proto.version == "sha1"
        assert proto.short_description == "Redis"
        assert proto.body.startswith("local k")

    def test_params(self) -> None:
        proto = parse_prototype(SOURCE)
        assert [p.name for p in proto.required_params()] == ["name"]
        opt = proto.optional_params()
        assert len(opt) == 1
        assert opt[0].name == "replicas"
        assert opt[0].default == "1"
        assert opt[0].description == "How many replicas"

    def test_short_description_defaults_to_description(self) -> None:
        proto = parse_prototype("// @name x\n// @description long one\n")
        assert proto.short_description == "long one"

    def test_missing_name_raises(self) -> None:
        with pytest.raises(FormatError, match="@name"):
            parse_prototype("// @description nothing\n{}", source="p.jsonnet")


class TestLoadAndLatest:
    def test_load_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "b.jsonnet").write_text("// @name b\n", encoding="utf-8")
        (tmp_path / "a.jsonnet").write_text("// @name a\n", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        assert [p.name for p in load_prototypes(tmp_path)] == ["a", "b"]

    def test_load_missing_dir(self, tmp_path: Path) -> None:
        assert load_prototypes(tmp_path / "nope") == []

    def test_latest_by_name(self) -> None:
        protos = [
            Prototype(name="b", version="0.1.0"),
            Prototype(name="a", version="0.2.0"),
            Prototype(name="a", version="0.10.0"),
            Prototype(name="a", version="garbage"),
        ]
        result = latest_by_name(protos)
        assert [(p.name, p.version) for p in result] == [("a", "0.10.0"), ("b", "0.1.0")]


class TestLookup:
    PROTOS = [
        Prototype(name="io.ksonnet.pkg.redis-persistent"),
        Prototype(name="io.ksonnet.pkg.apache-simple"),
        Prototype(name="io.ksonnet.pkg.redis-stateless"),
        Prototype(name="io.ksonnet.pkg.nginx-simple"),
    ]

    def test_search_substring_sorted(self) -> None:
        names = [p.name for p in search_names("redis", self.PROTOS)]
        assert names == ["io.ksonnet.pkg.redis-persistent", "io.ksonnet.pkg.redis-stateless"]

    def test_search_no_match(self) -> None:
        assert search_names("mysql", self.PROTOS) == []

    def test_find_by_suffix(self) -> None:
        assert find_by_suffix("apache-simple", self.PROTOS).name == "io.ksonnet.pkg.apache-simple"
        assert find_by_suffix("io.ksonnet.pkg.redis-stateless", self.PROTOS).name.endswith("stateless")

    def test_find_by_suffix_missing(self) -> None:
        with pytest.raises(NotFoundError):
            find_by_suffix("mysql", self.PROTOS)

    def test_find_by_suffix_ambiguous(self) -> None:
        with pytest.raises(ValidationError, match="歧义"):
            find_by_suffix("simple", self.PROTOS)
