"""Descriptor 解析测试"""

from __future__ import annotations

import pytest

from libvendor.core.exceptions import ValidationError
from libvendor.pkg.descriptor import Descriptor


class TestParse:
    @pytest.mark.parametrize("name,expected", [
        ("apache", Descriptor(part="apache")),
        ("incubator/apache", Descriptor("incubator", "apache")),
        ("incubator/apache@1.2.3", Descriptor("incubator", "apache", "1.2.3")),
        ("apache@abc123", Descriptor(part="apache", version="abc123")),
        ("helm-stable/mysql@0.3.0", Descriptor("helm-stable", "mysql", "0.3.0")),
    ])
    def test_valid(self, name: str, expected: Descriptor) -> None:
        assert Descriptor.parse(name) == expected

    @pytest.mark.parametrize("name", ["", "a@b@c", "reg_x/apache", "@1.0"])
    def test_invalid(self, name: str) -> None:
        with pytest.raises(ValidationError, match="无效"):
            Descriptor.parse(name)

    def test_str_roundtrip_forms(self) -> None:
        assert str(Descriptor(part="apache")) == "apache"
        assert str(Descriptor("incubator", "apache")) == "incubator/apache"
        assert str(Descriptor("incubator", "apache", "v1")) == "incubator/apache@v1"


class TestPathSegments:
    @pytest.mark.parametrize("name", [
        "incubator/../../../victim",
        "incubator/apache/..",
        "incubator/./apache",
        "incubator//apache",
        "incubator/apache/",
        "incubator//etc",
    ])
    def test_unsafe_part_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError):
            Descriptor.parse(name)

    def test_nested_part_allowed(self) -> None:
        d = Descriptor.parse("incubator/charts/mysql")
        assert d.part == "charts/mysql"

    def test_branch_with_slash_allowed(self) -> None:
        assert Descriptor.parse("incubator/apache@feature/x").version == "feature/x"

    @pytest.mark.parametrize("name", ["incubator/apache@../../x", "incubator/apache@/abs"])
    def test_unsafe_version_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError, match="版本"):
            Descriptor.parse(name)
