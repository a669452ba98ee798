"""有效 POM 构建器

把单个 pom.xml 与其父 POM 链合并为有效模型，覆盖坐标收集所需的 Maven 行为:

  - 父 POM 继承: 先按 relativePath（默认 ../pom.xml，GAV 一致才采用）
    查找，找不到再到本地仓库中查找
  - properties 合并，${...} 占位符替换（project.* / env.* / 自定义属性）
  - dependencyManagement 合并，scope=import 的 BOM 从本地仓库导入
  - 依赖缺省 version / scope 由 dependencyManagement 补齐
  - activeByDefault 的 profile 合并
  - modules 不继承

不做传递依赖解析与版本仲裁。构建失败时记录日志并返回 None，不向上抛出。
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import replace
from pathlib import Path
from typing import Callable

from mvnuploader.core.exceptions import ResolutionError
from mvnuploader.core.local_repo import default_local_repo, relative_artifact_path
from mvnuploader.core.models import Coordinate
from mvnuploader.core.pom.models import (
    DEFAULT_RELATIVE_PATH,
    ParentRef,
    PomDependency,
    PomModel,
    PomPlugin,
)
from mvnuploader.core.pom.parser import parse_pom

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 10


def has_placeholder(value: str) -> bool:
    return bool(_PLACEHOLDER_RE.search(value))


class EffectivePomBuilder:
    """基于本地文件与本地仓库的有效 POM 构建器"""

    def __init__(self, local_repo: str = "", env: dict[str, str] | None = None) -> None:
        self.local_repo = Path(local_repo or default_local_repo())
        self.env = dict(os.environ) if env is None else env
        self._raw_cache: dict[Path, PomModel] = {}

    # ---- 对外入口 ----

    def build_effective_model(
        self, pom_path: str | Path, process_plugins: bool = True,
    ) -> PomModel | None:
        """构建有效模型，失败返回 None"""
        path = Path(pom_path)
        if not path.is_file():
            logger.warning("POM 文件不存在: %s", path)
            return None
        try:
            model = self._build(path.resolve(), process_plugins, frozenset())
        except (ResolutionError, ET.ParseError, OSError) as e:
            logger.error("构建有效 POM 失败: %s (%s)", path, e)
            return None
        logger.debug(
            "成功构建有效 POM: %s:%s:%s",
            model.group_id, model.artifact_id, model.version,
        )
        return model

    def local_pom_path(self, group_id: str, artifact_id: str, version: str) -> Path:
        coord = Coordinate(group_id, artifact_id, version, "pom")
        return self.local_repo / relative_artifact_path(coord)

    # ---- 内部实现 ----

    def _raw(self, path: Path) -> PomModel:
        if path not in self._raw_cache:
            self._raw_cache[path] = parse_pom(path)
        return self._raw_cache[path]

    def _lineage(self, path: Path) -> list[PomModel]:
        """从当前 POM 到最顶层祖先的原始模型链"""
        chain: list[PomModel] = []
        visited: set[Path] = set()
        current: Path | None = path
        while current is not None:
            if current in visited:
                raise ResolutionError(f"父 POM 存在循环引用: {current}")
            visited.add(current)
            raw = self._raw(current)
            chain.append(raw)
            current = self._parent_path(raw.parent, current) if raw.parent else None
        return chain

    def _parent_path(self, parent: ParentRef, path: Path) -> Path:
        rel = DEFAULT_RELATIVE_PATH if parent.relative_path is None else parent.relative_path
        if rel:
            candidate = (path.parent / rel)
            if candidate.is_dir():
                candidate = candidate / "pom.xml"
            if candidate.is_file():
                candidate = candidate.resolve()
                found = self._raw(candidate)
                if (
                    found.artifact_id == parent.artifact_id
                    and found.effective_group_id == parent.group_id
                    and found.effective_version == parent.version
                ):
                    return candidate
                logger.debug("relativePath 指向的 POM 与 parent 声明不一致: %s", candidate)

        local = self.local_pom_path(parent.group_id, parent.artifact_id, parent.version)
        if local.is_file():
            logger.debug(
                "从本地仓库解析父 POM: %s:%s:%s -> %s",
                parent.group_id, parent.artifact_id, parent.version, local,
            )
            return local.resolve()
        raise ResolutionError(
            f"无法解析父 POM {parent.group_id}:{parent.artifact_id}:{parent.version}"
            f" (本地仓库路径: {local})"
        )

    @staticmethod
    def _with_active_profiles(raw: PomModel) -> PomModel:
        active = [p for p in raw.profiles if p.active_by_default]
        if not active:
            return raw
        merged = replace(
            raw,
            properties=dict(raw.properties),
            modules=list(raw.modules),
            dependencies=list(raw.dependencies),
            dependency_management=list(raw.dependency_management),
        )
        for p in active:
            merged.properties.update(p.properties)
            merged.modules.extend(m for m in p.modules if m not in merged.modules)
            merged.dependencies.extend(p.dependencies)
            merged.dependency_management.extend(p.dependency_management)
        return merged

    def _build(
        self, path: Path, process_plugins: bool, importing: frozenset[Path],
    ) -> PomModel:
        chain = [self._with_active_profiles(m) for m in self._lineage(path)]
        own = chain[0]

        properties: dict[str, str] = {}
        managed: dict[tuple, PomDependency] = {}
        dependencies: dict[tuple, PomDependency] = {}
        plugins: dict[tuple, PomPlugin] = {}
        plugin_mgmt: dict[tuple, PomPlugin] = {}
        for m in reversed(chain):
            properties.update(m.properties)
            for d in m.dependency_management:
                managed[d.management_key()] = d
            for d in m.dependencies:
                dependencies[d.management_key()] = d
            if process_plugins:
                for p in m.plugins:
                    plugins[p.key()] = p
                for p in m.plugin_management:
                    plugin_mgmt[p.key()] = p

        group_id = own.effective_group_id
        version = own.effective_version
        properties.update({
            "project.groupId": group_id,
            "project.artifactId": own.artifact_id,
            "project.version": version,
            "project.packaging": own.packaging,
            "pom.groupId": group_id,
            "pom.artifactId": own.artifact_id,
            "pom.version": version,
            "basedir": str(path.parent),
            "project.basedir": str(path.parent),
        })
        if own.parent:
            properties.update({
                "project.parent.groupId": own.parent.group_id,
                "project.parent.artifactId": own.parent.artifact_id,
                "project.parent.version": own.parent.version,
            })

        def interp(value: str) -> str:
            return self._interpolate(value, properties)

        managed_list = [self._interp_dep(d, interp) for d in managed.values()]
        managed_list = self._import_boms(managed_list, process_plugins, importing | {path})
        by_key = {d.management_key(): d for d in managed_list}

        deps = []
        for d in dependencies.values():
            d = self._interp_dep(d, interp)
            m = by_key.get(d.management_key())
            if m is not None:
                d = replace(d, version=d.version or m.version, scope=d.scope or m.scope)
            deps.append(d)

        for key, p in plugins.items():
            if not p.version and key in plugin_mgmt:
                plugins[key] = replace(p, version=plugin_mgmt[key].version)

        return PomModel(
            group_id=interp(group_id),
            artifact_id=own.artifact_id,
            version=interp(version),
            packaging=own.packaging,
            parent=own.parent,
            properties=properties,
            modules=list(own.modules),
            dependencies=deps,
            dependency_management=managed_list,
            plugins=[self._interp_plugin(p, interp) for p in plugins.values()],
            plugin_management=[self._interp_plugin(p, interp) for p in plugin_mgmt.values()],
        )

    def _import_boms(
        self, managed: list[PomDependency], process_plugins: bool,
        importing: frozenset[Path],
    ) -> list[PomDependency]:
        """把 scope=import 的 BOM 中的 dependencyManagement 合并进来（已有条目优先）"""
        result = list(managed)
        keys = {d.management_key() for d in managed}
        for d in managed:
            if not d.is_bom_import or has_placeholder(d.version) or not d.version:
                continue
            bom_path = self.local_pom_path(d.group_id, d.artifact_id, d.version)
            if not bom_path.is_file():
                logger.warning("本地仓库中找不到 BOM: %s:%s:%s", d.group_id, d.artifact_id, d.version)
                continue
            bom_path = bom_path.resolve()
            if bom_path in importing:
                logger.warning("BOM 存在循环导入，跳过: %s", bom_path)
                continue
            bom = self._build(bom_path, process_plugins, importing)
            for entry in bom.dependency_management:
                if entry.management_key() not in keys:
                    keys.add(entry.management_key())
                    result.append(entry)
        return result

    def _interpolate(self, value: str, properties: dict[str, str]) -> str:
        if not value or "${" not in value:
            return value

        def lookup(match: re.Match[str]) -> str:
            key = match.group(1)
            if key.startswith("env."):
                return self.env.get(key[4:], match.group(0))
            return properties.get(key, match.group(0))

        for _ in range(_MAX_INTERPOLATION_PASSES):
            new = _PLACEHOLDER_RE.sub(lookup, value)
            if new == value:
                break
            value = new
        return value

    @staticmethod
    def _interp_dep(d: PomDependency, interp: Callable[[str], str]) -> PomDependency:
        return replace(
            d,
            group_id=interp(d.group_id),
            artifact_id=interp(d.artifact_id),
            version=interp(d.version),
            type=interp(d.type),
            classifier=interp(d.classifier),
            scope=interp(d.scope),
        )

    def _interp_plugin(self, p: PomPlugin, interp: Callable[[str], str]) -> PomPlugin:
        return replace(
            p,
            group_id=interp(p.group_id),
            artifact_id=interp(p.artifact_id),
            version=interp(p.version),
            dependencies=[self._interp_dep(d, interp) for d in p.dependencies],
        )
