"""状态看板：展示层的只读快照

检查器发出 StatusUpdate 事件，看板按 seq 顺序应用到自己持有的状态表，
CLI 进度输出与 Web API 只读取看板，不直接读写检查器正在修改的记录。
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from types import MappingProxyType
from typing import Mapping

from mvnuploader.core.models import CheckStatus, Coordinate, DependencyRecord, StatusUpdate


class StatusBoard:
    """线程安全的状态表，apply 可直接作为检查器的 on_update 回调"""

    def __init__(self, records: Iterable[DependencyRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._states: dict[Coordinate, StatusUpdate] = {}
        for r in records:
            self._states[r.coordinate] = StatusUpdate(
                coordinate=r.coordinate,
                status=r.status,
                exists_in_remote=r.exists_in_remote,
                error_message=r.error_message,
            )

    def apply(self, update: StatusUpdate) -> None:
        with self._lock:
            current = self._states.get(update.coordinate)
            # 乱序到达的旧事件不覆盖新状态
            if current is not None and current.seq > update.seq:
                return
            self._states[update.coordinate] = update

    def view(self) -> Mapping[Coordinate, StatusUpdate]:
        with self._lock:
            return MappingProxyType(dict(self._states))

    def counts(self) -> dict[str, int]:
        with self._lock:
            result = {s.value: 0 for s in CheckStatus}
            for u in self._states.values():
                result[u.status.value] += 1
            return result
