"""依赖上传服务

使用独立的小线程池（默认 3 个线程）并行上传选中的依赖，
每条记录的 error_message / upload_url 只由上传它的任务写入。
上传不改变检查状态机：status 仍由 AvailabilityChecker 独占。
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from mvnuploader.core.exceptions import ConfigInvalidError
from mvnuploader.core.models import (
    DependencyRecord,
    RepositoryConfig,
    UploadResult,
    UploadSummary,
)
from mvnuploader.core.protocols import RepositoryConnection

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_WORKERS = 3

ClientFactory = Callable[[RepositoryConfig, float], RepositoryConnection]
ProgressCallback = Callable[[str, int, int], None]


def _default_client(config: RepositoryConfig, timeout: float) -> RepositoryConnection:
    from mvnuploader.services.repository_client import RepositoryClient
    return RepositoryClient(config, upload_timeout=timeout)


class UploadService:
    """批量上传"""

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        upload_timeout: float = 60.0,
    ) -> None:
        self._client_factory = client_factory or _default_client
        self.upload_timeout = upload_timeout

    def upload(
        self,
        records: Iterable[DependencyRecord],
        config: RepositoryConfig,
        concurrency: int = DEFAULT_UPLOAD_WORKERS,
        on_progress: ProgressCallback | None = None,
    ) -> UploadSummary:
        """上传给定记录，返回汇总；单条失败不影响其余记录

        Raises:
            ConfigInvalidError: 私仓配置无效
        """
        batch = list(dict.fromkeys(records))
        if not batch:
            logger.info("没有选中任何依赖需要上传")
            return UploadSummary()
        if not config.is_valid():
            raise ConfigInvalidError("私仓配置无效，无法上传依赖")

        client = self._client_factory(config, self.upload_timeout)
        total = len(batch)
        lock = threading.Lock()
        completed = 0

        def run_one(record: DependencyRecord) -> UploadResult:
            nonlocal completed
            result = self._upload_one(client, record)
            with lock:
                completed += 1
                current = completed
            if on_progress is not None:
                on_progress(record.gav, current, total)
            return result

        workers = max(1, min(concurrency, total))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upload") as executor:
            results = list(executor.map(run_one, batch))

        summary = UploadSummary(total=total)
        for record, result in zip(batch, results):
            if result.success:
                summary.success += 1
            else:
                summary.failure += 1
                summary.failed.append(record)

        logger.info(
            "依赖上传完成: 总数=%d, 成功=%d, 失败=%d",
            summary.total, summary.success, summary.failure,
        )
        return summary

    @staticmethod
    def _upload_one(client: RepositoryConnection, record: DependencyRecord) -> UploadResult:
        try:
            result = client.upload(record)
        except Exception as e:  # noqa: BLE001
            logger.exception("上传依赖时发生异常: %s", record.gav)
            result = UploadResult(False, f"上传异常: {type(e).__name__}: {e}")

        if result.success:
            record.error_message = ""
            record.upload_url = result.url
            logger.info("依赖上传成功: %s", record.gav)
        else:
            record.error_message = result.message
            logger.error("依赖上传失败: %s - %s", record.gav, result.message)
        return result
