"""配置加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

import mvnuploader.core.config as cfgmod
from mvnuploader.core.config import Config, get_config, init_config
from mvnuploader.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cfgmod, "_current", None)
    monkeypatch.delenv(cfgmod.ENV_REPO_PASSWORD, raising=False)


class TestConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        cfg = Config.from_file(str(tmp_path / "missing.yml"))
        assert cfg.check_workers == 10
        assert cfg.upload_workers == 3
        assert not cfg.repository.is_valid()

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yml"
        path.write_text(yaml.dump({
            "check_workers": 4,
            "expand_poms": True,
            "custom": "x",
            "repository": {
                "url": "https://nexus.example.com",
                "username": "deployer",
                "password": "pw",
                "repository_id": "releases",
            },
        }), encoding="utf-8")
        cfg = Config.from_file(str(path))
        assert cfg.check_workers == 4
        assert cfg.expand_poms is True
        assert cfg.extra == {"custom": "x"}
        assert cfg.repository.is_valid()
        assert cfg.repository.deploy_url == "https://nexus.example.com/repository/releases/"

    def test_password_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(cfgmod.ENV_REPO_PASSWORD, "from-env")
        cfg = Config.from_dict({"repository": {"url": "http://n", "username": "u"}})
        assert cfg.repository.password == "from-env"
        assert cfg.repository.is_valid()

    def test_file_password_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(cfgmod.ENV_REPO_PASSWORD, "from-env")
        cfg = Config.from_dict({"repository": {"password": "in-file"}})
        assert cfg.repository.password == "in-file"

    def test_bad_repository_section(self) -> None:
        with pytest.raises(ConfigError, match="repository"):
            Config.from_dict({"repository": ["not", "a", "mapping"]})

    def test_to_dict_masks_password(self) -> None:
        cfg = Config.from_dict({"repository": {"password": "secret"}})
        assert cfg.to_dict()["repository"]["password"] == "******"


class TestGlobalConfig:
    def test_get_config_default(self) -> None:
        assert get_config() is get_config()

    def test_init_config(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.yml"
        path.write_text("upload_workers: 7\n", encoding="utf-8")
        cfg = init_config(str(path))
        assert get_config() is cfg
        assert cfg.upload_workers == 7
