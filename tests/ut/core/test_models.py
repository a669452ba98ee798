"""核心数据模型测试：坐标 / 状态机 / 依赖记录 / 私仓配置"""

from __future__ import annotations

import pytest

from mvnuploader.core.exceptions import ValidationError
from mvnuploader.core.models import (
    CheckStatus,
    CheckSummary,
    Coordinate,
    DependencyRecord,
    DependencySnapshot,
    ModuleDescriptorRef,
    RepositoryConfig,
    UploadSummary,
)


class TestCoordinate:
    def test_defaults_to_jar(self) -> None:
        c = Coordinate("org.foo", "bar", "1.0")
        assert c.packaging == "jar"
        assert c.gav == "org.foo:bar:1.0"
        assert c.full == "org.foo:bar:1.0:jar"
        assert str(c) == "org.foo:bar:1.0"

    def test_equality_includes_packaging(self) -> None:
        assert Coordinate("g", "a", "1") == Coordinate("g", "a", "1", "jar")
        assert Coordinate("g", "a", "1", "pom") != Coordinate("g", "a", "1")
        assert len({Coordinate("g", "a", "1"), Coordinate("g", "a", "1")}) == 1

    def test_parse(self) -> None:
        assert Coordinate.parse("g:a:1") == Coordinate("g", "a", "1")
        assert Coordinate.parse(" g : a : 1 : pom ") == Coordinate("g", "a", "1", "pom")

    @pytest.mark.parametrize("text", ["g:a", "g:a:1:jar:extra", "g::1", ""])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(ValidationError, match="坐标格式错误"):
            Coordinate.parse(text)


class TestCheckStatus:
    @pytest.mark.parametrize("start", list(CheckStatus))
    def test_checking_reachable_from_any_state(self, start: CheckStatus) -> None:
        assert start.can_transition(CheckStatus.CHECKING)

    @pytest.mark.parametrize("target", [CheckStatus.EXISTS, CheckStatus.MISSING, CheckStatus.ERROR])
    def test_terminal_only_from_checking(self, target: CheckStatus) -> None:
        assert CheckStatus.CHECKING.can_transition(target)
        assert not CheckStatus.UNKNOWN.can_transition(target)
        assert not CheckStatus.EXISTS.can_transition(target)

    def test_never_back_to_unknown(self) -> None:
        for s in CheckStatus:
            assert not s.can_transition(CheckStatus.UNKNOWN)


class TestDependencyRecord:
    def test_defaults(self) -> None:
        r = DependencyRecord(Coordinate("g", "a", "1"))
        assert r.status is CheckStatus.UNKNOWN
        assert r.local_path == ""
        assert r.exists_in_remote is False
        assert r.selected is False

    def test_equality_by_coordinate(self) -> None:
        a = DependencyRecord(Coordinate("g", "a", "1"), local_path="/x")
        b = DependencyRecord(Coordinate("g", "a", "1"), selected=True)
        assert a == b
        assert len({a, b}) == 1

    def test_illegal_transition_rejected(self) -> None:
        r = DependencyRecord(Coordinate("g", "a", "1"))
        with pytest.raises(ValidationError, match="非法状态迁移"):
            r.transition(CheckStatus.EXISTS)
        assert r.status is CheckStatus.UNKNOWN

    def test_to_dict(self) -> None:
        r = DependencyRecord(Coordinate("g", "a", "1", "pom"))
        d = r.to_dict()
        assert d["packaging"] == "pom"
        assert d["status"] == "unknown"


class TestModuleDescriptorRef:
    def test_canonical_path(self, tmp_path) -> None:
        (tmp_path / "a").mkdir()
        pom = tmp_path / "pom.xml"
        pom.write_text("<project/>", encoding="utf-8")
        ref1 = ModuleDescriptorRef.of(pom)
        ref2 = ModuleDescriptorRef.of(tmp_path / "a" / ".." / "pom.xml")
        assert ref1 == ref2
        assert ref1.base_dir == tmp_path.resolve()


class TestRepositoryConfig:
    @pytest.mark.parametrize(("url", "user", "pwd", "valid"), [
        ("http://nexus", "u", "p", True),
        ("", "u", "p", False),
        ("http://nexus", " ", "p", False),
        ("http://nexus", "u", "", False),
    ])
    def test_is_valid(self, url: str, user: str, pwd: str, valid: bool) -> None:
        assert RepositoryConfig(url, user, pwd).is_valid() is valid

    def test_deploy_url(self) -> None:
        assert RepositoryConfig("http://nexus/").deploy_url == "http://nexus/"
        cfg = RepositoryConfig("http://nexus/", repository_id="releases")
        assert cfg.deploy_url == "http://nexus/repository/releases/"

    def test_to_dict_masks_password(self) -> None:
        cfg = RepositoryConfig("http://nexus", "u", "secret")
        assert cfg.to_dict()["password"] == "******"
        assert cfg.to_dict(mask_password=False)["password"] == "secret"


class TestSnapshotAndSummaries:
    def test_find_and_selected(self) -> None:
        r1 = DependencyRecord(Coordinate("g", "a", "1"), selected=True)
        r2 = DependencyRecord(Coordinate("g", "b", "1"))
        snap = DependencySnapshot(version=1, root="/p/pom.xml", records=[r1, r2])
        assert snap.find(Coordinate("g", "b", "1")) is r2
        assert snap.find(Coordinate("g", "c", "1")) is None
        assert snap.selected() == [r1]
        assert len(snap.to_dict()["records"]) == 2

    def test_check_summary_total(self) -> None:
        assert CheckSummary(exists=2, missing=1, errors=1, cancelled=5).total == 4

    def test_upload_summary_rate(self) -> None:
        assert UploadSummary().success_rate == 0.0
        s = UploadSummary(total=4, success=3, failure=1)
        assert s.has_failures
        assert s.success_rate == 0.75
