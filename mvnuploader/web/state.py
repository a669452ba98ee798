"""Web 层持有的快照状态

每次扫描整体替换为新快照与新看板；检查器只通过事件更新看板。
同一快照同时只允许一次检查。
"""

from __future__ import annotations

import threading

from mvnuploader.core.models import DependencySnapshot
from mvnuploader.core.status_board import StatusBoard


class SnapshotHolder:
    """最新快照及其状态看板"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: DependencySnapshot | None = None
        self._board: StatusBoard | None = None
        self._checking: set[int] = set()

    def replace(self, snapshot: DependencySnapshot) -> StatusBoard:
        board = StatusBoard(snapshot.records)
        with self._lock:
            self._snapshot = snapshot
            self._board = board
        return board

    def current(self) -> tuple[DependencySnapshot | None, StatusBoard | None]:
        with self._lock:
            return self._snapshot, self._board

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None
            self._board = None
            self._checking.clear()

    def begin_check(self, version: int) -> bool:
        """标记快照进入检查，已在检查中时返回 False"""
        with self._lock:
            if version in self._checking:
                return False
            self._checking.add(version)
            return True

    def end_check(self, version: int) -> None:
        with self._lock:
            self._checking.discard(version)


holder = SnapshotHolder()
