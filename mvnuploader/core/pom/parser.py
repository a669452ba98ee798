"""pom.xml 解析

基于 xml.etree.ElementTree，忽略命名空间，输出原始 PomModel（不做继承与属性替换）。
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from mvnuploader.core.pom.models import (
    DEFAULT_PLUGIN_GROUP,
    ParentRef,
    PomDependency,
    PomModel,
    PomPlugin,
    PomProfile,
)

logger = logging.getLogger(__name__)


def _strip_namespaces(root: ET.Element) -> None:
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]


def _text(el: ET.Element | None, name: str, default: str = "") -> str:
    if el is None:
        return default
    child = el.find(name)
    if child is None or child.text is None:
        return default
    return child.text.strip()


def _parse_dependency(el: ET.Element) -> PomDependency:
    return PomDependency(
        group_id=_text(el, "groupId"),
        artifact_id=_text(el, "artifactId"),
        version=_text(el, "version"),
        type=_text(el, "type") or "jar",
        classifier=_text(el, "classifier"),
        scope=_text(el, "scope"),
        optional=_text(el, "optional").lower() == "true",
    )


def _parse_dependencies(el: ET.Element | None) -> list[PomDependency]:
    if el is None:
        return []
    return [_parse_dependency(d) for d in el.findall("dependency")]


def _parse_plugins(el: ET.Element | None) -> list[PomPlugin]:
    if el is None:
        return []
    plugins = []
    for p in el.findall("plugin"):
        plugins.append(PomPlugin(
            group_id=_text(p, "groupId") or DEFAULT_PLUGIN_GROUP,
            artifact_id=_text(p, "artifactId"),
            version=_text(p, "version"),
            dependencies=_parse_dependencies(p.find("dependencies")),
        ))
    return plugins


def _parse_properties(el: ET.Element | None) -> dict[str, str]:
    if el is None:
        return {}
    return {
        child.tag: (child.text or "").strip()
        for child in el
        if isinstance(child.tag, str)
    }


def _parse_modules(el: ET.Element | None) -> list[str]:
    if el is None:
        return []
    return [m.text.strip() for m in el.findall("module") if m.text and m.text.strip()]


def _parse_profile(el: ET.Element) -> PomProfile:
    activation = el.find("activation")
    return PomProfile(
        profile_id=_text(el, "id"),
        active_by_default=_text(activation, "activeByDefault").lower() == "true",
        properties=_parse_properties(el.find("properties")),
        modules=_parse_modules(el.find("modules")),
        dependencies=_parse_dependencies(el.find("dependencies")),
        dependency_management=_parse_dependencies(
            el.find("dependencyManagement/dependencies"),
        ),
    )


def parse_pom_text(content: str | bytes) -> PomModel:
    """解析 pom.xml 文本

    Raises:
        xml.etree.ElementTree.ParseError: XML 格式错误
    """
    root = ET.fromstring(content)
    _strip_namespaces(root)

    parent = None
    parent_el = root.find("parent")
    if parent_el is not None:
        rel_el = parent_el.find("relativePath")
        parent = ParentRef(
            group_id=_text(parent_el, "groupId"),
            artifact_id=_text(parent_el, "artifactId"),
            version=_text(parent_el, "version"),
            relative_path=None if rel_el is None else (rel_el.text or "").strip(),
        )

    return PomModel(
        group_id=_text(root, "groupId"),
        artifact_id=_text(root, "artifactId"),
        version=_text(root, "version"),
        packaging=_text(root, "packaging") or "jar",
        parent=parent,
        properties=_parse_properties(root.find("properties")),
        modules=_parse_modules(root.find("modules")),
        dependencies=_parse_dependencies(root.find("dependencies")),
        dependency_management=_parse_dependencies(
            root.find("dependencyManagement/dependencies"),
        ),
        plugins=_parse_plugins(root.find("build/plugins")),
        plugin_management=_parse_plugins(root.find("build/pluginManagement/plugins")),
        profiles=[_parse_profile(p) for p in root.findall("profiles/profile")],
    )


def parse_pom(path: str | Path) -> PomModel:
    """读取并解析 pom.xml 文件"""
    p = Path(path)
    logger.debug("解析 POM: %s", p)
    return parse_pom_text(p.read_bytes())
