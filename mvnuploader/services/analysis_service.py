"""依赖分析服务

串联 扫描 → 收集 → 本地路径标注 → 私仓检查 → 上传 的整个流程。

每次 scan 生成一个新的 DependencySnapshot（version 递增），
后续 check / upload 都显式接收快照，不依赖任何全局“当前依赖列表”。
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from mvnuploader.core.checker import AvailabilityChecker, StatusListener
from mvnuploader.core.collector import ArtifactCollector
from mvnuploader.core.exceptions import ValidationError
from mvnuploader.core.local_repo import LocalPathResolver, default_local_repo
from mvnuploader.core.models import (
    CheckSummary,
    DependencyRecord,
    DependencySnapshot,
    ModuleDescriptorRef,
    RepositoryConfig,
    UploadSummary,
)
from mvnuploader.core.pom.builder import EffectivePomBuilder
from mvnuploader.core.protocols import ModelResolver
from mvnuploader.core.scanner import ModuleGraphScanner
from mvnuploader.services.repository_client import RepositoryClient
from mvnuploader.services.upload_service import ProgressCallback, UploadService

if TYPE_CHECKING:
    from mvnuploader.core.config import Config

logger = logging.getLogger(__name__)


def _check_connection(config: RepositoryConfig, timeout: float) -> RepositoryClient:
    return RepositoryClient(config, check_timeout=timeout)


class AnalysisService:
    """依赖分析 / 预检查 / 上传 流程协调"""

    def __init__(
        self,
        config: Config | None = None,
        *,
        resolver: ModelResolver | None = None,
        checker: AvailabilityChecker | None = None,
        uploader: UploadService | None = None,
    ) -> None:
        if config is None:
            from mvnuploader.core.config import get_config
            config = get_config()
        self.config = config
        local_repo = default_local_repo(config.local_repo)
        self.path_resolver = LocalPathResolver(local_repo)
        self.local_repo = local_repo
        self._resolver = resolver
        self.checker = checker or AvailabilityChecker(
            _check_connection, timeout=config.check_timeout,
        )
        self.uploader = uploader or UploadService(upload_timeout=config.upload_timeout)
        self._version_lock = threading.Lock()
        self._version = 0

    @property
    def repository(self) -> RepositoryConfig:
        return self.config.repository

    def _next_version(self) -> int:
        with self._version_lock:
            self._version += 1
            return self._version

    def _new_resolver(self) -> ModelResolver:
        """每次扫描使用新的构建器，磁盘上改动过的 POM 会被重新读取"""
        if self._resolver is not None:
            return self._resolver
        return EffectivePomBuilder(local_repo=self.local_repo)

    def scan(self, root_pom: str | Path, *, expand_poms: bool | None = None) -> DependencySnapshot:
        """扫描多模块项目并收集依赖坐标，返回新快照"""
        root_path = Path(root_pom)
        if root_path.is_dir():
            root_path = root_path / "pom.xml"
        if not root_path.is_file():
            raise ValidationError(f"根 POM 不存在: {root_path}")

        root = ModuleDescriptorRef.of(root_path)
        logger.info("开始分析 Maven 依赖: %s", root)
        resolver = self._new_resolver()
        scan = ModuleGraphScanner(resolver).scan(root)

        expand = self.config.expand_poms if expand_poms is None else expand_poms
        collector = ArtifactCollector(resolver, self.path_resolver, expand_poms=expand)
        coordinates = collector.collect(scan.modules)

        snapshot = DependencySnapshot(
            version=self._next_version(),
            root=str(root),
            modules=list(scan.modules),
            records=coordinates.to_records(self.path_resolver),
            warnings=list(scan.warnings),
        )
        logger.info(
            "分析完成 (快照 v%d): %d 个模块, %d 个依赖",
            snapshot.version, len(snapshot.modules), len(snapshot.records),
        )
        return snapshot

    def check(
        self,
        snapshot: DependencySnapshot,
        *,
        concurrency: int | None = None,
        cancel: threading.Event | None = None,
        on_update: StatusListener | None = None,
    ) -> CheckSummary:
        """检查快照中全部依赖在私仓中的状态"""
        return self.checker.check(
            snapshot.records,
            self.repository,
            concurrency or self.config.check_workers,
            cancel=cancel,
            on_update=on_update,
        )

    def upload(
        self,
        snapshot: DependencySnapshot,
        *,
        records: list[DependencyRecord] | None = None,
        concurrency: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> UploadSummary:
        """上传指定记录（默认为快照中被选中的记录）"""
        targets = snapshot.selected() if records is None else records
        return self.uploader.upload(
            targets,
            self.repository,
            concurrency or self.config.upload_workers,
            on_progress=on_progress,
        )
