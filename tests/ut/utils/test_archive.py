"""tar.gz 读取测试"""

from __future__ import annotations

import io
import tarfile

import pytest

from libvendor.core.exceptions import FormatError
from libvendor.utils.archive import unarchive_tgz


class TestUnarchive:
    def test_regular_files_in_order(self, make_tgz) -> None:
        data = make_tgz({"chart/Chart.yaml": b"name: chart\n", "chart/values.yaml": b"a: 1\n"})
        seen = []
        count = unarchive_tgz(data, lambda name, body: seen.append((name, body)))
        assert count == 2
        assert seen == [("chart/Chart.yaml", b"name: chart\n"), ("chart/values.yaml", b"a: 1\n")]

    def test_directories_and_links_skipped(self) -> None:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tf:
            d = tarfile.TarInfo("chart")
            d.type = tarfile.DIRTYPE
            tf.addfile(d)
            link = tarfile.TarInfo("chart/link")
            link.type = tarfile.SYMTYPE
            link.linkname = "Chart.yaml"
            tf.addfile(link)
            f = tarfile.TarInfo("chart/Chart.yaml")
            f.size = 2
            tf.addfile(f, io.BytesIO(b"ok"))
        seen = []
        assert unarchive_tgz(buf.getvalue(), lambda n, b: seen.append(n)) == 1
        assert seen == ["chart/Chart.yaml"]

    def test_corrupt_archive_raises(self) -> None:
        with pytest.raises(FormatError, match="无法解压"):
            unarchive_tgz(b"definitely not gzip", lambda n, b: None)
