"""Maven 私仓客户端

职责:
- HEAD 请求检查构件是否存在于私仓
- PUT 上传构件（主文件 + 同目录 .pom + 可选 -sources.jar）
- Basic 认证

URL 布局与本地仓库一致: <deploy_url><group path>/<artifact>/<version>/<filename>
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from dataclasses import replace
from pathlib import Path

from mvnuploader.core.exceptions import CheckError, CheckTimeoutError, ConfigInvalidError
from mvnuploader.core.local_repo import relative_artifact_path
from mvnuploader.core.models import (
    Coordinate,
    DependencyRecord,
    RepositoryConfig,
    UploadResult,
)
from mvnuploader.utils.net import basic_auth_header, validate_url_scheme

logger = logging.getLogger(__name__)

# HEAD 返回这些状态码视为"不存在"，其余非 2xx 视为检查失败
_NOT_FOUND_CODES = frozenset((404, 410))

_CONTENT_TYPES = {
    "jar": "application/java-archive",
    "pom": "text/xml",
}


class RepositoryClient:
    """私仓 HTTP 客户端，配置在批次内只读，可被多个线程共享"""

    def __init__(
        self,
        config: RepositoryConfig,
        *,
        check_timeout: float = 30.0,
        upload_timeout: float = 60.0,
    ) -> None:
        self.config = config
        self.check_timeout = check_timeout
        self.upload_timeout = upload_timeout
        if config.url:
            validate_url_scheme(config.url, context="repository url")

    def _headers(self) -> dict[str, str]:
        if self.config.username and self.config.password:
            return {"Authorization": basic_auth_header(self.config.username, self.config.password)}
        return {}

    def artifact_url(self, coordinate: Coordinate, classifier: str = "") -> str:
        return self.config.deploy_url + relative_artifact_path(coordinate, classifier)

    # ---- 存在性检查 ----

    def exists(self, coordinate: Coordinate) -> bool:
        """检查构件是否存在

        Raises:
            ConfigInvalidError: 私仓配置无效
            CheckTimeoutError: 请求超时
            CheckError: 其他网络或 HTTP 错误
        """
        if not self.config.is_valid():
            raise ConfigInvalidError("私仓配置无效，无法检查依赖存在性")

        url = self.artifact_url(coordinate)
        logger.debug("检查依赖存在性: %s", url)
        req = urllib.request.Request(url, method="HEAD", headers=self._headers())
        try:
            with urllib.request.urlopen(req, timeout=self.check_timeout) as resp:  # nosec B310
                code = resp.status
        except urllib.error.HTTPError as e:
            if e.code in _NOT_FOUND_CODES:
                logger.debug("依赖 %s 不存在 (HTTP %d)", coordinate.gav, e.code)
                return False
            raise CheckError(f"HTTP 错误 {e.code}: {e.reason} ({url})") from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise CheckTimeoutError(f"检查超时 ({self.check_timeout}s): {url}") from e
            raise CheckError(f"网络错误: {e.reason} ({url})") from e
        except TimeoutError as e:
            raise CheckTimeoutError(f"检查超时 ({self.check_timeout}s): {url}") from e
        except OSError as e:
            raise CheckError(f"网络错误: {e} ({url})") from e

        exists = 200 <= code < 300
        logger.debug("依赖 %s 是否存在: %s (HTTP %d)", coordinate.gav, exists, code)
        return exists

    # ---- 上传 ----

    def upload(self, record: DependencyRecord) -> UploadResult:
        """上传依赖到私仓，失败以 UploadResult 返回，不抛异常"""
        gav = record.gav
        if not self.config.is_valid():
            logger.error("私仓配置无效，无法上传依赖")
            return UploadResult(False, "私仓配置无效")
        if not record.local_path.strip():
            logger.error("依赖 %s 本地路径为空", gav)
            return UploadResult(False, "本地路径为空")

        main_file = Path(record.local_path)
        if not main_file.is_file():
            logger.error("依赖文件不存在: %s", main_file)
            return UploadResult(False, f"依赖文件不存在: {main_file}")

        coord = record.coordinate
        main = self._put_file(self.artifact_url(coord), main_file)
        if not main.success:
            return main

        if coord.packaging != "pom":
            pom_file = main_file.with_name(f"{main_file.stem}.pom")
            if pom_file.is_file():
                pom_url = self.artifact_url(replace(coord, packaging="pom"))
                pom = self._put_file(pom_url, pom_file)
                if not pom.success:
                    return pom

            sources_file = main_file.with_name(f"{main_file.stem}-sources.jar")
            if sources_file.is_file():
                src_url = self.artifact_url(replace(coord, packaging="jar"), "sources")
                src = self._put_file(src_url, sources_file)
                if not src.success:
                    logger.warning("Sources 上传失败（忽略）: %s - %s", gav, src.message)

        logger.info("依赖 %s 上传成功", gav)
        return UploadResult(True, "上传成功", url=main.url)

    def _put_file(self, url: str, file: Path) -> UploadResult:
        ext = file.suffix.lstrip(".")
        content_type = _CONTENT_TYPES.get(ext, "application/octet-stream")
        headers = {"Content-Type": content_type, **self._headers()}
        logger.debug("上传文件: %s -> %s", file, url)
        try:
            req = urllib.request.Request(
                url, data=file.read_bytes(), method="PUT", headers=headers,
            )
            with urllib.request.urlopen(req, timeout=self.upload_timeout) as resp:  # nosec B310
                code = resp.status
        except urllib.error.HTTPError as e:
            return UploadResult(False, f"上传失败: HTTP {e.code} - {e.reason}", url=url)
        except urllib.error.URLError as e:
            return UploadResult(False, f"上传文件失败: {e.reason}", url=url)
        except OSError as e:
            logger.exception("上传文件时发生错误: %s", file)
            return UploadResult(False, f"上传文件失败: {e}", url=url)

        if 200 <= code < 300:
            return UploadResult(True, f"上传成功: HTTP {code}", url=url)
        return UploadResult(False, f"上传失败: HTTP {code}", url=url)
