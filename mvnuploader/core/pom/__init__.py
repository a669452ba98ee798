"""POM 解析与有效模型构建

- models.py: POM 元素数据模型
- parser.py: pom.xml 解析（忽略命名空间）
- builder.py: 父 POM 继承、属性替换、BOM 导入后的有效模型
"""

from mvnuploader.core.pom.builder import EffectivePomBuilder
from mvnuploader.core.pom.models import (
    ParentRef,
    PomDependency,
    PomModel,
    PomPlugin,
    PomProfile,
)
from mvnuploader.core.pom.parser import parse_pom, parse_pom_text

__all__ = [
    "EffectivePomBuilder",
    "ParentRef",
    "PomDependency",
    "PomModel",
    "PomPlugin",
    "PomProfile",
    "parse_pom",
    "parse_pom_text",
]
