"""App 应用配置测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from libvendor.core.app import App
from libvendor.core.config import Config
from libvendor.core.exceptions import StateError
from libvendor.core.models import LibraryRef, RegistryConfig


@pytest.fixture()
def app(tmp_path: Path) -> App:
    return App(tmp_path)


class TestPaths:
    def test_default_paths(self, tmp_path: Path, app: App) -> None:
        assert app.root == tmp_path
        assert app.vendor_path() == tmp_path / "vendor"
        assert app.registry_cache_path() == tmp_path / ".libvendor" / "registries"
        assert app.store_file == tmp_path / "app.yaml"

    def test_custom_config(self, tmp_path: Path) -> None:
        app = App(tmp_path, Config(vendor_dir="third_party", app_file="ks.yaml"))
        assert app.vendor_path() == tmp_path / "third_party"
        assert app.store_file == tmp_path / "ks.yaml"


class TestRegistries:
    def test_add_and_list(self, app: App) -> None:
        app.add_registry(RegistryConfig("incubator", "github", "github.com/a/b", "sha1"))
        regs = app.registries()
        assert regs["incubator"] == RegistryConfig("incubator", "github", "github.com/a/b", "sha1")

    def test_duplicate_raises(self, app: App) -> None:
        app.add_registry(RegistryConfig("incubator", "fs", "/x"))
        with pytest.raises(StateError, match="已存在"):
            app.add_registry(RegistryConfig("incubator", "fs", "/y"))

    def test_override_wins(self, app: App) -> None:
        app.add_registry(RegistryConfig("incubator", "github", "github.com/a/b"))
        app.add_registry(RegistryConfig("incubator", "fs", "../parts"), is_override=True)
        assert app.registries()["incubator"].protocol == "fs"

    def test_update_registry_persists_pin(self, tmp_path: Path, app: App) -> None:
        app.add_registry(RegistryConfig("incubator", "github", "github.com/a/b", "old"))
        app.update_registry(RegistryConfig("incubator", "github", "github.com/a/b", "new"))
        assert App(tmp_path).registries()["incubator"].pinned_version == "new"

    def test_update_registry_targets_override_section(self, tmp_path: Path, app: App) -> None:
        app.add_registry(RegistryConfig("r", "github", "github.com/a/b", "s1"), is_override=True)
        app.update_registry(RegistryConfig("r", "github", "github.com/a/b", "s2"))
        reloaded = App(tmp_path)
        assert reloaded._get_raw("r", "registries") is None
        assert reloaded.registries()["r"].pinned_version == "s2"


class TestLibraries:
    def test_update_lib_add_and_remove(self, tmp_path: Path, app: App) -> None:
        app.update_lib("apache", LibraryRef("apache", "incubator", "sha1"))
        assert App(tmp_path).libraries() == {"apache": LibraryRef("apache", "incubator", "sha1")}
        app.update_lib("apache", None)
        assert App(tmp_path).libraries() == {}

    def test_remove_missing_is_noop(self, app: App) -> None:
        app.update_lib("ghost", None)
        assert app.libraries() == {}
