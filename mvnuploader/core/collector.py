"""构件坐标收集器

对每个已扫描模块构建有效模型（处理插件），收集构建所需的全部坐标:

  a) 模块自身坐标
  b) parent POM（packaging=pom）
  c) dependencies
  d) dependencyManagement（含 BOM）
  e) build.plugins / pluginManagement.plugins 及插件自身的依赖

groupId / artifactId / version 为空或版本含未解析占位符的条目会被跳过。
可选地递归展开 POM 类型坐标（parent、BOM）：在本地仓库中找到其 pom
后继续收集其模型声明的坐标。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from mvnuploader.core.local_repo import LocalPathResolver
from mvnuploader.core.models import (
    DEFAULT_PACKAGING,
    Coordinate,
    DependencyRecord,
    ModuleDescriptorRef,
)
from mvnuploader.core.pom.builder import has_placeholder
from mvnuploader.core.pom.models import PomDependency, PomModel, PomPlugin
from mvnuploader.core.protocols import ModelResolver

logger = logging.getLogger(__name__)

# 插件构件本身是 jar
PLUGIN_PACKAGING = "jar"


class CoordinateSet:
    """保持插入顺序的坐标集合"""

    def __init__(self, coordinates: Iterable[Coordinate] = ()) -> None:
        self._items: dict[Coordinate, None] = {}
        for c in coordinates:
            self.add(c)

    def add(self, coordinate: Coordinate) -> bool:
        """加入坐标，已存在时返回 False"""
        if coordinate in self._items:
            logger.debug("坐标重复，跳过: %s", coordinate.full)
            return False
        self._items[coordinate] = None
        return True

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def poms(self) -> list[Coordinate]:
        return [c for c in self._items if c.packaging == "pom"]

    def to_records(self, path_resolver: LocalPathResolver) -> list[DependencyRecord]:
        """转换为依赖记录列表，local_path 仅在本地文件存在时填充"""
        records = [path_resolver.annotate(DependencyRecord(c)) for c in self._items]
        local_hits = sum(1 for r in records if r.local_path)
        logger.info("转换完成: %d 个依赖, 本地已存在 %d 个", len(records), local_hits)
        return records


def _valid(group: str, artifact: str, version: str) -> bool:
    if not group.strip() or not artifact.strip():
        return False
    return bool(version.strip()) and not has_placeholder(version)


class ArtifactCollector:
    """从模块列表收集构件坐标"""

    def __init__(
        self,
        resolver: ModelResolver,
        path_resolver: LocalPathResolver | None = None,
        expand_poms: bool = False,
    ) -> None:
        self.resolver = resolver
        self.path_resolver = path_resolver or LocalPathResolver()
        self.expand_poms = expand_poms

    def collect(self, modules: Iterable[ModuleDescriptorRef]) -> CoordinateSet:
        result = CoordinateSet()
        for ref in modules:
            model = self.resolver.build_effective_model(ref.path, process_plugins=True)
            if model is None:
                logger.warning("无法构建有效模型，跳过坐标收集: %s", ref)
                continue
            self.collect_from_model(model, result)

        if self.expand_poms:
            self._expand_pom_artifacts(result)

        logger.info("共收集到 %d 个构件坐标", len(result))
        return result

    def collect_from_model(self, model: PomModel, result: CoordinateSet) -> None:
        if _valid(model.group_id, model.artifact_id, model.version):
            result.add(Coordinate(
                model.group_id, model.artifact_id, model.version,
                model.packaging or DEFAULT_PACKAGING,
            ))

        parent = model.parent
        if parent and _valid(parent.group_id, parent.artifact_id, parent.version):
            result.add(Coordinate(parent.group_id, parent.artifact_id, parent.version, "pom"))

        for dep in model.dependencies:
            self._add_dependency(dep, result)
        for dep in model.dependency_management:
            self._add_dependency(dep, result)

        for plugin in model.plugins:
            self._add_plugin(plugin, result)
        for plugin in model.plugin_management:
            self._add_plugin(plugin, result)

    @staticmethod
    def _add_dependency(dep: PomDependency, result: CoordinateSet) -> None:
        if not _valid(dep.group_id, dep.artifact_id, dep.version):
            logger.debug("跳过无效依赖: %s:%s:%s", dep.group_id, dep.artifact_id, dep.version)
            return
        result.add(Coordinate(
            dep.group_id, dep.artifact_id, dep.version, dep.type or DEFAULT_PACKAGING,
        ))

    def _add_plugin(self, plugin: PomPlugin, result: CoordinateSet) -> None:
        if not _valid(plugin.group_id, plugin.artifact_id, plugin.version):
            return
        result.add(Coordinate(
            plugin.group_id, plugin.artifact_id, plugin.version, PLUGIN_PACKAGING,
        ))
        for dep in plugin.dependencies:
            self._add_dependency(dep, result)

    def _expand_pom_artifacts(self, result: CoordinateSet) -> None:
        """显式栈展开 POM 类型坐标，visited 以 GAV 为 key"""
        visited: set[str] = set()
        stack = result.poms()

        while stack:
            coord = stack.pop()
            if coord.gav in visited:
                continue
            visited.add(coord.gav)

            pom_path = self.path_resolver.expected_path(coord)
            model = self.resolver.build_effective_model(pom_path, process_plugins=True)
            if model is None:
                logger.debug("本地仓库中不存在或无法解析 POM: %s", coord.gav)
                continue

            before = len(result)
            self.collect_from_model(model, result)
            if len(result) > before:
                stack.extend(c for c in result.poms() if c.gav not in visited)
