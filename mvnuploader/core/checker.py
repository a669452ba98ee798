"""私仓存在性检查器

对每条依赖记录并发执行远程存在性检查，驱动记录的状态机:

  UNKNOWN → CHECKING → EXISTS / MISSING / ERROR

- 私仓配置无效时整批直接抛出 ConfigInvalidError，不发起任何网络请求
- 单条记录的失败只影响该记录（状态置为 ERROR 并写入错误信息）
- 每次检查有独立超时，超时按 ERROR 处理
- 支持协作式取消：取消后不再启动新的检查，已完成的记录保留其状态
- 每次状态变化发出不可变的 StatusUpdate 事件，展示层据此维护自己的视图

每条记录只由处理它的那个任务写入。同一记录同时只允许一个批次检查，
另一批次遇到正在检查中的记录时跳过并计入 busy。
"""

from __future__ import annotations

import logging
import threading
import traceback
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from mvnuploader.core.exceptions import (
    CheckError,
    CheckTimeoutError,
    ConfigInvalidError,
    ValidationError,
)
from mvnuploader.core.models import (
    CheckStatus,
    CheckSummary,
    Coordinate,
    DependencyRecord,
    RepositoryConfig,
    StatusUpdate,
)
from mvnuploader.core.protocols import RepositoryConnection

logger = logging.getLogger(__name__)

DEFAULT_CHECK_TIMEOUT = 30.0
DEFAULT_CHECK_WORKERS = 10

# 连接工厂：接受私仓配置与单次超时，返回连接对象
ConnectionFactory = Callable[[RepositoryConfig, float], RepositoryConnection]
StatusListener = Callable[[StatusUpdate], None]

_CANCELLED = "cancelled"
_BUSY = "busy"

# 正在检查中的记录（按对象标识），跨批次互斥
_inflight: set[int] = set()
_inflight_lock = threading.Lock()


def _claim(record: DependencyRecord) -> bool:
    with _inflight_lock:
        if id(record) in _inflight:
            return False
        _inflight.add(id(record))
        return True


def _release(record: DependencyRecord) -> None:
    with _inflight_lock:
        _inflight.discard(id(record))


class AvailabilityChecker:
    """并发存在性检查器

    私仓连接由 connection_factory 注入（Strategy 模式），
    服务层传入 RepositoryClient，测试时传入桩对象。
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        timeout: float = DEFAULT_CHECK_TIMEOUT,
    ) -> None:
        self._connection_factory = connection_factory
        self.timeout = timeout
        self._seq_lock = threading.Lock()
        self._seq = 0

    def check(
        self,
        records: Iterable[DependencyRecord],
        config: RepositoryConfig,
        concurrency: int = DEFAULT_CHECK_WORKERS,
        *,
        cancel: threading.Event | None = None,
        on_update: StatusListener | None = None,
    ) -> CheckSummary:
        """批量检查，原地更新记录并返回统计

        Raises:
            ConfigInvalidError: 私仓配置缺少 url / username / password
        """
        batch = list(dict.fromkeys(records))
        if not batch:
            return CheckSummary()
        if not config.is_valid():
            raise ConfigInvalidError("私仓配置无效: url / username / password 均不能为空")

        conn = self._connection_factory(config, self.timeout)
        cancel = cancel or threading.Event()
        workers = max(1, min(concurrency, len(batch)))
        logger.info("开始批量检查 %d 个依赖的存在性 (并发 %d)...", len(batch), workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="check") as executor:
            futures = [
                executor.submit(self._check_one, conn, r, cancel, on_update)
                for r in batch
            ]
            try:
                outcomes = [f.result() for f in futures]
            except KeyboardInterrupt:
                # 先通知排队中的任务退出，再等待线程池关闭
                cancel.set()
                for f in futures:
                    f.cancel()
                logger.warning("检查被中断，已取消尚未开始的检查")
                raise

        summary = CheckSummary(
            exists=outcomes.count(CheckStatus.EXISTS),
            missing=outcomes.count(CheckStatus.MISSING),
            errors=outcomes.count(CheckStatus.ERROR),
            cancelled=outcomes.count(_CANCELLED),
            busy=outcomes.count(_BUSY),
        )
        logger.info(
            "依赖检查完成: 已存在=%d, 缺失=%d, 错误=%d, 取消=%d, 跳过=%d",
            summary.exists, summary.missing, summary.errors,
            summary.cancelled, summary.busy,
        )
        return summary

    def _check_one(
        self,
        conn: RepositoryConnection,
        record: DependencyRecord,
        cancel: threading.Event,
        on_update: StatusListener | None,
    ) -> CheckStatus | str:
        if cancel.is_set():
            return _CANCELLED
        if not _claim(record):
            logger.info("依赖 %s 正由其他批次检查，跳过", record.gav)
            return _BUSY
        try:
            return self._run_check(conn, record, on_update)
        finally:
            _release(record)

    def _run_check(
        self,
        conn: RepositoryConnection,
        record: DependencyRecord,
        on_update: StatusListener | None,
    ) -> CheckStatus:
        record.transition(CheckStatus.CHECKING)
        self._emit(on_update, record)

        try:
            exists = self._call_with_deadline(conn.exists, record.coordinate)
        except CheckError as e:
            logger.warning("检查依赖 %s 失败: %s", record.gav, e)
            return self._fail(record, e, on_update)
        except Exception as e:  # noqa: BLE001
            logger.exception("检查依赖 %s 存在性时发生错误", record.gav)
            return self._fail(record, e, on_update)

        record.exists_in_remote = exists
        record.selected = not exists
        record.error_message = ""
        record.stack_trace = ""
        return self._settle(
            record, CheckStatus.EXISTS if exists else CheckStatus.MISSING, on_update,
        )

    def _fail(
        self, record: DependencyRecord, exc: Exception, on_update: StatusListener | None,
    ) -> CheckStatus:
        record.exists_in_remote = False
        record.selected = False
        record.error_message = str(exc) or type(exc).__name__
        record.stack_trace = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__),
        )
        return self._settle(record, CheckStatus.ERROR, on_update)

    def _settle(
        self, record: DependencyRecord, status: CheckStatus, on_update: StatusListener | None,
    ) -> CheckStatus:
        """写入终态；记录已被外部改动时只影响本条记录"""
        try:
            record.transition(status)
        except ValidationError as e:
            logger.error("依赖 %s 状态写入失败: %s", record.gav, e)
            return CheckStatus.ERROR
        self._emit(on_update, record)
        return status

    def _call_with_deadline(
        self, fn: Callable[[Coordinate], bool], coordinate: Coordinate,
    ) -> bool:
        """在独立守护线程中执行远程调用，超过 timeout 抛出 CheckTimeoutError

        超时后的调用结果被丢弃，不会再写入任何记录。
        """
        box: dict[str, Any] = {}

        def target() -> None:
            try:
                box["value"] = fn(coordinate)
            except Exception as e:  # noqa: BLE001
                box["error"] = e

        t = threading.Thread(target=target, name=f"check-{coordinate.gav}", daemon=True)
        t.start()
        t.join(self.timeout)
        if t.is_alive():
            raise CheckTimeoutError(f"检查超时 ({self.timeout}s): {coordinate.gav}")
        if "error" in box:
            raise box["error"]
        return bool(box["value"])

    def _emit(self, listener: StatusListener | None, record: DependencyRecord) -> None:
        if listener is None:
            return
        with self._seq_lock:
            self._seq += 1
            seq = self._seq
        update = StatusUpdate(
            coordinate=record.coordinate,
            status=record.status,
            exists_in_remote=record.exists_in_remote,
            error_message=record.error_message,
            seq=seq,
        )
        try:
            listener(update)
        except Exception:  # noqa: BLE001
            logger.exception("状态事件处理失败: %s", record.gav)
