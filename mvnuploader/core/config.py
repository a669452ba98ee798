"""集中配置管理

从 YAML 文件加载 + 编程式覆盖，提供统一的配置入口。

配置示例 (configs/default.yml):

    local_repo: ~/.m2/repository
    check_workers: 10
    upload_workers: 3
    check_timeout: 30
    repository:
      url: https://nexus.example.com
      username: deployer
      password: ""            # 留空时读取环境变量 MVNUPLOADER_REPO_PASSWORD
      repository_id: releases
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any

from mvnuploader.core.exceptions import ConfigError
from mvnuploader.core.models import RepositoryConfig
from mvnuploader.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/default.yml"
ENV_REPO_PASSWORD = "MVNUPLOADER_REPO_PASSWORD"


@dataclass
class Config:
    """全局配置"""

    # 本地仓库根目录，留空则按环境推导（见 local_repo.default_local_repo）
    local_repo: str = ""

    # 并发与超时
    check_workers: int = 10
    upload_workers: int = 3
    check_timeout: float = 30.0
    upload_timeout: float = 60.0

    # 收集
    expand_poms: bool = False

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        known = {f for f in cls.__dataclass_fields__ if f not in ("repository", "extra")}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {
            k: v for k, v in data.items()
            if k not in known and k != "repository"
        }
        repo_data = data.get("repository") or {}
        if not isinstance(repo_data, dict):
            raise ConfigError(f"repository 配置段必须是映射，实际为: {type(repo_data).__name__}")
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置项无效: {e}") from e
        cfg.repository = RepositoryConfig.from_dict(repo_data)
        cfg.extra = extra
        cfg.apply_env()
        return cfg

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_PATH) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            cfg = cls()
            cfg.apply_env()
            return cfg
        return cls.from_dict(data)

    def apply_env(self) -> None:
        """密码不落盘：配置中留空时从环境变量读取"""
        if not self.repository.password:
            self.repository.password = os.getenv(ENV_REPO_PASSWORD, "")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["repository"] = self.repository.to_dict()
        return data


_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
        _current.apply_env()
    return _current


def init_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current


def set_config(cfg: Config | None) -> None:
    """直接替换全局配置（测试与 Web 入口使用）"""
    global _current  # noqa: PLW0603
    _current = cfg
