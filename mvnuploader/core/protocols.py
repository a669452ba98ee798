"""领域协议定义

扫描器、收集器、检查器依赖这些 Protocol 而非具体实现，
测试中可直接替换为桩对象。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from mvnuploader.core.models import Coordinate, DependencyRecord, UploadResult
    from mvnuploader.core.pom.models import PomModel


class ModelResolver(Protocol):
    """有效模型解析器协议

    无法构建模型时返回 None，而不是抛出异常。
    """

    def build_effective_model(
        self, pom_path: str | Path, process_plugins: bool = True,
    ) -> PomModel | None:
        ...


class RepositoryConnection(Protocol):
    """远程私仓连接协议"""

    def exists(self, coordinate: Coordinate) -> bool:
        """构件是否存在；网络或协议错误抛出 CheckError"""
        ...

    def upload(self, record: DependencyRecord) -> UploadResult:
        """上传本地构件到私仓"""
        ...
