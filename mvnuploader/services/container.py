"""服务容器：CLI 与 Web 共用的依赖注入入口

同一容器内的服务共享配置与 POM 解析缓存。
容器只持有无状态服务；扫描结果以快照形式返回给调用方，不在容器中共享。

用法:
    container = ServiceContainer(config=Config.from_file("configs/default.yml"))
    snapshot = container.analysis.scan("pom.xml")
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mvnuploader.core.config import Config
    from mvnuploader.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from mvnuploader.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def analysis(self) -> AnalysisService:
        if "analysis" not in self._instances:
            from mvnuploader.services.analysis_service import AnalysisService
            self._instances["analysis"] = AnalysisService(config=self._config)
        return self._instances["analysis"]  # type: ignore[return-value]


_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
