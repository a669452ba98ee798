"""私仓存在性检查器测试"""

from __future__ import annotations

import threading

import pytest

from mvnuploader.core.checker import AvailabilityChecker
from mvnuploader.core.exceptions import CheckError, ConfigInvalidError
from mvnuploader.core.models import (
    CheckStatus,
    Coordinate,
    DependencyRecord,
    RepositoryConfig,
    StatusUpdate,
)
from mvnuploader.core.status_board import StatusBoard

VALID = RepositoryConfig("http://nexus.local", "deployer", "secret")


class FakeConnection:
    """按 artifactId 返回预设结果的桩连接"""

    def __init__(self, behaviour: dict[str, object]) -> None:
        self.behaviour = behaviour
        self.calls: list[Coordinate] = []
        self.release = threading.Event()
        self.started = threading.Event()
        self._lock = threading.Lock()

    def exists(self, coordinate: Coordinate) -> bool:
        with self._lock:
            self.calls.append(coordinate)
        self.started.set()
        outcome = self.behaviour.get(coordinate.artifact, False)
        if outcome == "hang":
            self.release.wait(5)
            return True
        if isinstance(outcome, Exception):
            raise outcome
        return bool(outcome)

    def upload(self, record):  # pragma: no cover
        raise NotImplementedError


def _records(*artifacts: str) -> list[DependencyRecord]:
    return [DependencyRecord(Coordinate("org.x", a, "1")) for a in artifacts]


def _checker(conn: FakeConnection, timeout: float = 5.0) -> AvailabilityChecker:
    return AvailabilityChecker(connection_factory=lambda cfg, t: conn, timeout=timeout)


class TestAvailabilityChecker:
    def test_exists_and_missing(self) -> None:
        conn = FakeConnection({"a": True, "b": False})
        recs = _records("a", "b")
        summary = _checker(conn).check(recs, VALID, concurrency=2)

        assert (summary.exists, summary.missing, summary.errors) == (1, 1, 0)
        a, b = recs
        assert a.status is CheckStatus.EXISTS and a.exists_in_remote and not a.selected
        assert b.status is CheckStatus.MISSING and not b.exists_in_remote and b.selected

    def test_empty_input_no_network(self) -> None:
        created = []

        def factory(cfg, timeout):
            created.append(cfg)
            return FakeConnection({})

        summary = AvailabilityChecker(connection_factory=factory).check([], VALID)
        assert summary.total == 0
        assert created == []

    def test_invalid_config_fails_fast(self) -> None:
        conn = FakeConnection({"a": True})
        recs = _records("a", "b")
        with pytest.raises(ConfigInvalidError):
            _checker(conn).check(recs, RepositoryConfig("http://nexus.local", "", ""))
        assert conn.calls == []
        assert all(r.status is CheckStatus.UNKNOWN for r in recs)

    def test_error_isolated_to_record(self) -> None:
        conn = FakeConnection({"a": True, "b": CheckError("HTTP 错误 500"), "c": False})
        recs = _records("a", "b", "c")
        summary = _checker(conn).check(recs, VALID, concurrency=3)

        assert (summary.exists, summary.missing, summary.errors) == (1, 1, 1)
        b = recs[1]
        assert b.status is CheckStatus.ERROR
        assert "500" in b.error_message
        assert "CheckError" in b.stack_trace
        assert not b.selected

    def test_unexpected_exception_becomes_error(self) -> None:
        conn = FakeConnection({"a": RuntimeError("boom")})
        recs = _records("a")
        summary = _checker(conn).check(recs, VALID)
        assert summary.errors == 1
        assert recs[0].error_message == "boom"

    def test_timeout_does_not_block_others(self) -> None:
        conn = FakeConnection({"x": "hang", "y": True})
        recs = _records("x", "y")
        try:
            summary = _checker(conn, timeout=0.2).check(recs, VALID, concurrency=2)
        finally:
            conn.release.set()

        x, y = recs
        assert x.status is CheckStatus.ERROR
        assert "超时" in x.error_message
        assert y.status is CheckStatus.EXISTS
        assert summary.errors == 1 and summary.exists == 1

    def test_duplicates_checked_once(self) -> None:
        conn = FakeConnection({"a": True})
        rec = _records("a")[0]
        _checker(conn).check([rec, rec, DependencyRecord(rec.coordinate)], VALID)
        assert len(conn.calls) == 1

    def test_cancel_before_start(self) -> None:
        conn = FakeConnection({"a": True, "b": True})
        recs = _records("a", "b")
        cancel = threading.Event()
        cancel.set()
        summary = _checker(conn).check(recs, VALID, cancel=cancel)
        assert summary.cancelled == 2
        assert conn.calls == []
        assert all(r.status is CheckStatus.UNKNOWN for r in recs)

    def test_recheck_from_terminal_state(self) -> None:
        conn = FakeConnection({"a": False})
        recs = _records("a")
        checker = _checker(conn)
        checker.check(recs, VALID)
        conn.behaviour["a"] = True
        checker.check(recs, VALID)
        assert recs[0].status is CheckStatus.EXISTS
        assert not recs[0].selected


class TestStatusEvents:
    def test_events_follow_state_machine(self) -> None:
        conn = FakeConnection({"a": True, "b": False})
        events: list[StatusUpdate] = []
        lock = threading.Lock()

        def listener(u: StatusUpdate) -> None:
            with lock:
                events.append(u)

        _checker(conn).check(_records("a", "b"), VALID, concurrency=2, on_update=listener)

        by_artifact: dict[str, list[CheckStatus]] = {}
        for u in sorted(events, key=lambda e: e.seq):
            by_artifact.setdefault(u.coordinate.artifact, []).append(u.status)
        assert by_artifact == {
            "a": [CheckStatus.CHECKING, CheckStatus.EXISTS],
            "b": [CheckStatus.CHECKING, CheckStatus.MISSING],
        }
        assert len({u.seq for u in events}) == 4

    def test_listener_failure_does_not_break_check(self) -> None:
        def listener(u: StatusUpdate) -> None:
            raise RuntimeError("listener bug")

        recs = _records("a")
        summary = _checker(FakeConnection({"a": True})).check(recs, VALID, on_update=listener)
        assert summary.exists == 1

    def test_board_tracks_checker(self) -> None:
        recs = _records("a", "b", "c")
        board = StatusBoard(recs)
        conn = FakeConnection({"a": True, "b": False, "c": CheckError("x")})
        _checker(conn).check(recs, VALID, concurrency=3, on_update=board.apply)

        counts = board.counts()
        assert counts == {"unknown": 0, "checking": 0, "exists": 1, "missing": 1, "error": 1}


class TestCancellation:
    def test_cancel_mid_batch_keeps_finished_records(self) -> None:
        conn = FakeConnection({"a": True, "b": True, "c": False, "d": False})
        recs = _records("a", "b", "c", "d")
        cancel = threading.Event()

        def listener(u: StatusUpdate) -> None:
            if u.status.is_terminal:
                cancel.set()

        summary = _checker(conn).check(
            recs, VALID, concurrency=1, cancel=cancel, on_update=listener,
        )

        assert recs[0].status is CheckStatus.EXISTS
        assert all(r.status is CheckStatus.UNKNOWN for r in recs[1:])
        assert (summary.exists, summary.cancelled) == (1, 3)
        assert conn.calls == [recs[0].coordinate]

    def test_interrupt_sets_cancel_before_pool_shutdown(self) -> None:
        conn = FakeConnection({})
        recs = _records("a", "b", "c", "d", "e", "f")
        cancel = threading.Event()

        def listener(u: StatusUpdate) -> None:
            if u.coordinate.artifact == "a":
                raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            _checker(conn).check(
                recs, VALID, concurrency=1, cancel=cancel, on_update=listener,
            )

        assert cancel.is_set()
        # 中断与下一条任务启动之间最多有一条记录抢先执行
        assert len(conn.calls) <= 1
        assert sum(r.status is CheckStatus.UNKNOWN for r in recs) >= len(recs) - 2


class TestOverlappingChecks:
    def test_second_batch_skips_record_in_flight(self) -> None:
        conn = FakeConnection({"a": "hang"})
        rec = _records("a")[0]
        checker = _checker(conn)
        results: list = []
        errors: list[BaseException] = []

        def first() -> None:
            try:
                results.append(checker.check([rec], VALID))
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        t = threading.Thread(target=first)
        t.start()
        try:
            assert conn.started.wait(5)
            second = _checker(conn).check([rec], VALID)
        finally:
            conn.release.set()
            t.join(5)

        assert second.busy == 1 and second.total == 0
        assert errors == []
        assert results[0].exists == 1
        assert rec.status is CheckStatus.EXISTS
        assert len(conn.calls) == 1

    def test_record_free_again_after_batch(self) -> None:
        conn = FakeConnection({"a": False})
        rec = _records("a")[0]
        checker = _checker(conn)
        checker.check([rec], VALID)
        summary = checker.check([rec], VALID)
        assert summary.busy == 0 and summary.missing == 1

    def test_external_status_change_contained_to_record(self) -> None:
        conn = FakeConnection({"a": False, "b": True})
        recs = _records("a", "b")

        def listener(u: StatusUpdate) -> None:
            if u.coordinate.artifact == "a" and u.status is CheckStatus.CHECKING:
                recs[0].status = CheckStatus.EXISTS

        summary = _checker(conn).check(recs, VALID, concurrency=1, on_update=listener)

        assert summary.errors == 1 and summary.exists == 1
        assert recs[1].status is CheckStatus.EXISTS
