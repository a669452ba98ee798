"""POM 数据模型

只描述 pom.xml 中与模块发现、坐标收集相关的元素。
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"
DEFAULT_RELATIVE_PATH = "../pom.xml"


@dataclass
class ParentRef:
    """<parent> 元素；relative_path 为 None 表示未声明（取默认 ../pom.xml）"""

    group_id: str
    artifact_id: str
    version: str
    relative_path: str | None = None


@dataclass
class PomDependency:
    """<dependency> 元素"""

    group_id: str
    artifact_id: str
    version: str = ""
    type: str = "jar"
    classifier: str = ""
    scope: str = ""
    optional: bool = False

    def management_key(self) -> tuple[str, str, str, str]:
        return (self.group_id, self.artifact_id, self.type, self.classifier)

    @property
    def is_bom_import(self) -> bool:
        return self.scope == "import" and self.type == "pom"


@dataclass
class PomPlugin:
    """<plugin> 元素，包含插件自身的依赖"""

    artifact_id: str
    group_id: str = DEFAULT_PLUGIN_GROUP
    version: str = ""
    dependencies: list[PomDependency] = field(default_factory=list)

    def key(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)


@dataclass
class PomProfile:
    """<profile> 元素，仅 activeByDefault 的 profile 会被合并"""

    profile_id: str
    active_by_default: bool = False
    properties: dict[str, str] = field(default_factory=dict)
    modules: list[str] = field(default_factory=list)
    dependencies: list[PomDependency] = field(default_factory=list)
    dependency_management: list[PomDependency] = field(default_factory=list)


@dataclass
class PomModel:
    """单个 pom.xml 的模型

    原始解析结果与构建后的有效模型共用此结构；
    有效模型中 group_id / version 已按父 POM 继承补齐，属性已替换。
    """

    artifact_id: str
    group_id: str = ""
    version: str = ""
    packaging: str = "jar"
    parent: ParentRef | None = None
    properties: dict[str, str] = field(default_factory=dict)
    modules: list[str] = field(default_factory=list)
    dependencies: list[PomDependency] = field(default_factory=list)
    dependency_management: list[PomDependency] = field(default_factory=list)
    plugins: list[PomPlugin] = field(default_factory=list)
    plugin_management: list[PomPlugin] = field(default_factory=list)
    profiles: list[PomProfile] = field(default_factory=list)

    @property
    def effective_group_id(self) -> str:
        if self.group_id:
            return self.group_id
        return self.parent.group_id if self.parent else ""

    @property
    def effective_version(self) -> str:
        if self.version:
            return self.version
        return self.parent.version if self.parent else ""
