"""垃圾回收测试"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from libvendor.core.app import App
from libvendor.core.exceptions import ValidationError
from libvendor.core.models import RegistryConfig
from libvendor.pkg.descriptor import Descriptor
from libvendor.registry.cache import cache_dependency
from libvendor.registry.gc import GarbageCollector, remove_empty_parents
from libvendor.registry.locate import add
from libvendor.registry.package_manager import PackageManager


def _resolver(installed: bool, path: str) -> MagicMock:
    resolver = MagicMock()
    resolver.is_installed.return_value = installed
    resolver.vendor_path.return_value = path
    return resolver


class TestRemoveEmptyParents:
    def test_prunes_up_to_root(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        (root / "a" / "b").mkdir(parents=True)
        remove_empty_parents(root / "a" / "b" / "c", root)
        assert not (root / "a").exists()
        assert root.is_dir()

    def test_stops_at_non_empty(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "keep.txt").write_text("x", encoding="utf-8")
        remove_empty_parents(root / "a" / "b" / "c", root)
        assert not (root / "a" / "b").exists()
        assert (root / "a" / "keep.txt").is_file()

    def test_never_removes_root(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        root.mkdir()
        remove_empty_parents(root / "x", root)
        assert root.is_dir()

    def test_outside_root_untouched(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        root.mkdir()
        outside = tmp_path / "elsewhere" / "empty"
        outside.mkdir(parents=True)
        remove_empty_parents(outside / "x", root)
        assert outside.is_dir()

    def test_sibling_prefix_not_treated_as_inside(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        root.mkdir()
        sibling = tmp_path / "vendor2" / "empty"
        sibling.mkdir(parents=True)
        remove_empty_parents(sibling / "x", root)
        assert sibling.is_dir()

    def test_root_itself_as_path(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        root.mkdir()
        remove_empty_parents(root, root)
        assert root.is_dir()
        assert tmp_path.is_dir()


class TestRemoveOrphans:
    def test_installed_is_noop(self, tmp_path: Path) -> None:
        target = tmp_path / "vendor" / "incubator" / "apache"
        target.mkdir(parents=True)
        resolver = _resolver(True, str(target))
        GarbageCollector(resolver, tmp_path / "vendor").remove_orphans(Descriptor("incubator", "apache"))
        assert target.is_dir()
        resolver.vendor_path.assert_not_called()

    def test_empty_path_is_noop(self, tmp_path: Path) -> None:
        GarbageCollector(_resolver(False, ""), tmp_path).remove_orphans(Descriptor(part="x"))
        assert tmp_path.is_dir()

    @pytest.mark.parametrize("rel", ["incubator/apache", "a/b/c/d", "missing"])
    def test_missing_path_is_not_error(self, tmp_path: Path, rel: str) -> None:
        root = tmp_path / "vendor"
        root.mkdir()
        GarbageCollector(_resolver(False, str(root / rel)), root).remove_orphans(Descriptor(part="x"))
        assert root.is_dir()

    def test_removes_subtree_and_prunes(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        target = root / "incubator" / "apache"
        (target / "prototypes").mkdir(parents=True)
        (target / "parts.yaml").write_text("name: apache", encoding="utf-8")
        GarbageCollector(_resolver(False, str(target)), root).remove_orphans(Descriptor("incubator", "apache"))
        assert not (root / "incubator").exists()
        assert root.is_dir()

    def test_keeps_shared_registry_dir(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        (root / "incubator" / "apache").mkdir(parents=True)
        (root / "incubator" / "nginx").mkdir(parents=True)
        gc = GarbageCollector(_resolver(False, str(root / "incubator" / "apache")), root)
        gc.remove_orphans(Descriptor("incubator", "apache"))
        assert (root / "incubator" / "nginx").is_dir()

    def test_prune_failure_not_fatal(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        target = root / "incubator" / "apache"
        target.mkdir(parents=True)
        gc = GarbageCollector(_resolver(False, str(target)), root)
        with patch("libvendor.registry.gc.remove_empty_parents", side_effect=OSError("busy")):
            gc.remove_orphans(Descriptor("incubator", "apache"))
        assert not target.exists()


class TestEndToEnd:
    def test_install_then_remove(self, tmp_path: Path, registry_dir: Path) -> None:
        root = tmp_path / "app"
        root.mkdir()
        app = App(root)
        add(app, "fs", "incubator", "../parts")
        d = Descriptor.parse("incubator/apache")
        cache_dependency(app, d)
        assert (app.vendor_path() / "incubator" / "apache" / "parts.yaml").is_file()

        app.update_lib("apache", None)
        GarbageCollector(PackageManager(app), app.vendor_path()).remove_orphans(d)
        assert not (app.vendor_path() / "incubator").exists()
        assert app.vendor_path().is_dir()


class TestContainment:
    def test_traversal_outside_root_refused(self, tmp_path: Path) -> None:
        root = tmp_path / "app" / "vendor"
        (root / "incubator").mkdir(parents=True)
        victim = tmp_path / "victim"
        victim.mkdir()
        (victim / "data.txt").write_text("keep", encoding="utf-8")

        escaped = str(root / "incubator" / ".." / ".." / ".." / "victim")
        gc = GarbageCollector(_resolver(False, escaped), root)
        with pytest.raises(ValidationError, match="不在"):
            gc.remove_orphans(Descriptor("incubator", "x"))
        assert (victim / "data.txt").is_file()
        assert (root / "incubator").is_dir()

    def test_root_itself_refused(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        (root / "incubator").mkdir(parents=True)
        gc = GarbageCollector(_resolver(False, str(root)), root)
        with pytest.raises(ValidationError):
            gc.remove_orphans(Descriptor("incubator", "x"))
        assert (root / "incubator").is_dir()

    def test_symlinked_parent_escaping_root_refused(self, tmp_path: Path) -> None:
        root = tmp_path / "vendor"
        root.mkdir()
        outside = tmp_path / "outside"
        (outside / "lib").mkdir(parents=True)
        (root / "incubator").symlink_to(outside, target_is_directory=True)
        gc = GarbageCollector(_resolver(False, str(root / "incubator" / "lib")), root)
        with pytest.raises(ValidationError):
            gc.remove_orphans(Descriptor("incubator", "lib"))
        assert (outside / "lib").is_dir()

    def test_unparsed_traversal_via_package_manager(self, tmp_path: Path) -> None:
        app_root = tmp_path / "app"
        app_root.mkdir()
        app = App(app_root)
        app.add_registry(RegistryConfig(name="incubator", protocol="fs", uri="../parts"))
        (app.vendor_path() / "incubator").mkdir(parents=True)
        victim = tmp_path / "victim"
        victim.mkdir()

        gc = GarbageCollector(PackageManager(app), app.vendor_path())
        with pytest.raises(ValidationError):
            gc.remove_orphans(Descriptor("incubator", "../../../victim"))
        assert victim.is_dir()
