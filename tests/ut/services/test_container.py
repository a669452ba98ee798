"""ServiceContainer 单元测试"""

from __future__ import annotations

import pytest

import mvnuploader.core.config as cfgmod
from mvnuploader.services.container import (
    ServiceContainer,
    get_container,
    reset_container,
)


@pytest.fixture(autouse=True)
def _setup_config(tmp_path, monkeypatch: pytest.MonkeyPatch):
    cfg = cfgmod.Config(local_repo=str(tmp_path / "m2"), check_workers=2)
    monkeypatch.setattr(cfgmod, "_current", cfg)
    reset_container()
    yield
    reset_container()


class TestServiceContainer:
    def test_lazy_loading(self) -> None:
        c = ServiceContainer()
        assert len(c._instances) == 0
        _ = c.analysis
        assert "analysis" in c._instances

    def test_shared_instance(self) -> None:
        c = ServiceContainer()
        assert c.analysis is c.analysis

    def test_uses_global_config(self) -> None:
        assert ServiceContainer().config.check_workers == 2

    def test_explicit_config(self, tmp_path) -> None:
        cfg = cfgmod.Config(local_repo=str(tmp_path), upload_workers=9)
        c = ServiceContainer(config=cfg)
        assert c.analysis.config is cfg
        assert c.analysis.path_resolver.repo_root == str(tmp_path)


class TestGlobalContainer:
    def test_singleton_and_reset(self) -> None:
        first = get_container()
        assert get_container() is first
        reset_container()
        assert get_container() is not first
