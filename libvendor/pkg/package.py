"""包视图

- LocalPackage:  github / fs 协议库，读取 vendor/<registry>/<name>/parts.yaml
- HelmPackage:   helm 协议 chart，读取 vendor/<registry>/<chart>/helm/<ver>/<chart>/Chart.yaml
- RemotePackage: 未安装、仅有远端元数据的只读视图
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from libvendor.core.exceptions import FormatError, NotFoundError
from libvendor.pkg.descriptor import Descriptor
from libvendor.pkg.parts import PARTS_FILE, PartMetadata
from libvendor.pkg.prototype import ParamSchema, Prototype, load_prototypes
from libvendor.utils.version import latest_version
from libvendor.utils.yaml_io import parse_yaml

if TYPE_CHECKING:
    from libvendor.core.protocols import InstalledChecker

logger = logging.getLogger(__name__)

HELM_DIR = "helm"
CHART_FILE = "Chart.yaml"
PROTOTYPES_DIR = "prototypes"

_HELM_PROTOTYPE_BODY = """\
std.prune(std.native("renderHelmChart")(
   "{registry}",
   "{chart}",
   params.version,
   params.values,
   params.name,
 ))
"""


def library_dir(vendor_root: Path, registry: str, name: str) -> Path:
    """通用库目录: vendor/<registry>/<name>"""
    return vendor_root / registry / name


def chart_versions_dir(vendor_root: Path, registry: str, chart: str) -> Path:
    return vendor_root / registry / chart / HELM_DIR


def latest_chart_version(vendor_root: Path, registry: str, chart: str) -> str:
    """本地已安装 chart 的最高版本"""
    base = chart_versions_dir(vendor_root, registry, chart)
    if not base.is_dir():
        raise NotFoundError(f"chart {registry}/{chart} 没有已安装版本: {base}")
    latest = latest_version([d.name for d in base.iterdir() if d.is_dir()])
    if not latest:
        raise NotFoundError(f"chart {registry}/{chart} 没有可识别的版本目录")
    return latest


class Package:
    """包的公共属性"""

    def __init__(
        self,
        name: str,
        registry_name: str,
        version: str = "",
        checker: InstalledChecker | None = None,
    ) -> None:
        self.name = name
        self.registry_name = registry_name
        self.version = version
        self._checker = checker

    @property
    def description(self) -> str:
        return ""

    @property
    def path(self) -> Path | None:
        return None

    def is_installed(self) -> bool:
        if self._checker is None:
            return False
        return self._checker.is_installed(
            Descriptor(registry=self.registry_name, part=self.name),
        )

    def prototypes(self) -> list[Prototype]:
        return []

    def __str__(self) -> str:
        if self.version:
            return f"{self.registry_name}/{self.name}@{self.version}"
        return f"{self.registry_name}/{self.name}"


class LocalPackage(Package):
    """已 vendor 的 github / fs 库"""

    def __init__(
        self,
        vendor_root: Path,
        name: str,
        registry_name: str,
        version: str = "",
        checker: InstalledChecker | None = None,
    ) -> None:
        super().__init__(name, registry_name, version, checker)
        self._dir = library_dir(vendor_root, registry_name, name)
        parts_path = self._dir / PARTS_FILE
        if not parts_path.is_file():
            raise NotFoundError(f"读取库配置失败，文件不存在: {parts_path}")
        self.metadata = PartMetadata.from_yaml(
            parts_path.read_bytes(), source=str(parts_path),
        )

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def path(self) -> Path:
        return self._dir

    def prototypes(self) -> list[Prototype]:
        return load_prototypes(self._dir / PROTOTYPES_DIR, version=self.version)


class HelmPackage(Package):
    """已 vendor 的 helm chart"""

    def __init__(
        self,
        vendor_root: Path,
        name: str,
        registry_name: str,
        version: str = "",
        checker: InstalledChecker | None = None,
    ) -> None:
        super().__init__(name, registry_name, version, checker)
        self._vendor_root = vendor_root
        self._chart_version = version or latest_chart_version(vendor_root, registry_name, name)
        chart_path = self._chart_file()
        if chart_path is None:
            raise NotFoundError(f"读取 chart 配置失败，{self.path} 下没有 {CHART_FILE}")
        try:
            self._chart = parse_yaml(chart_path.read_bytes(), source=str(chart_path))
        except (yaml.YAMLError, ValueError) as e:
            raise FormatError(f"无法解析 chart 配置 {chart_path}: {e}") from e

    def _chart_file(self) -> Path | None:
        """归档内的 chart 目录通常与 chart 同名，自定义安装名时取唯一的子目录"""
        preferred = self.path / self.name / CHART_FILE
        if preferred.is_file():
            return preferred
        found = sorted(self.path.glob(f"*/{CHART_FILE}"))
        return found[0] if found else None

    @property
    def description(self) -> str:
        return str(self._chart.get("description", "") or "")

    @property
    def path(self) -> Path:
        return chart_versions_dir(self._vendor_root, self.registry_name, self.name) / self._chart_version

    def prototypes(self) -> list[Prototype]:
        """每个 chart 暴露一个渲染原型，版本为本地最高版本"""
        latest = latest_chart_version(self._vendor_root, self.registry_name, self.name)
        short = f"Helm Chart {self.name} from the {self.registry_name} registry"
        return [Prototype(
            name=f"io.ksonnet.pkg.{self.registry_name}-{self.name}",
            version=latest,
            description=short,
            short_description=short,
            params=[
                ParamSchema(name="name", type="string", description="Name of the component"),
                ParamSchema(
                    name="version", type="string", default=latest,
                    description="Version of the Helm chart. If blank, it will use latest installed version",
                ),
                ParamSchema(name="values", type="object", default="{}", description="Helm values"),
            ],
            body=_HELM_PROTOTYPE_BODY.format(registry=self.registry_name, chart=self.name),
        )]


class RemotePackage(Package):
    """远端库：未安装，不暴露原型"""

    def __init__(self, registry_name: str, metadata: PartMetadata) -> None:
        super().__init__(metadata.name, registry_name, metadata.version)
        self.metadata = metadata

    @property
    def description(self) -> str:
        return self.metadata.description

    def is_installed(self) -> bool:
        return False
