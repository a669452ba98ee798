"""本地仓库路径解析

职责:
- 计算坐标在本地 Maven 仓库中的预期路径（纯函数，不做 IO）
- 判断记录的本地文件是否实际存在（只做 stat，不改 status）

路径规则:
  <repo_root>/<group 中的 '.' 换成 '/'>/<artifact>/<version>/<artifact>-<version>.<ext>
  packaging 为 pom 时 ext = pom，否则 ext = packaging
"""

from __future__ import annotations

import os
from pathlib import Path

from mvnuploader.core.models import Coordinate, DependencyRecord

ENV_LOCAL_REPO = "MAVEN_REPO_LOCAL"


def default_local_repo(override: str = "") -> str:
    """本地仓库根目录: 显式配置 > 环境变量 MAVEN_REPO_LOCAL > ~/.m2/repository"""
    root = override or os.getenv(ENV_LOCAL_REPO, "")
    if not root:
        root = str(Path.home() / ".m2" / "repository")
    return str(Path(root).expanduser().absolute())


def artifact_filename(coord: Coordinate, classifier: str = "") -> str:
    ext = "pom" if coord.packaging == "pom" else coord.packaging
    suffix = f"-{classifier}" if classifier else ""
    return f"{coord.artifact}-{coord.version}{suffix}.{ext}"


def relative_artifact_path(coord: Coordinate, classifier: str = "") -> str:
    """仓库内相对路径，本地仓库与远程私仓共用同一布局"""
    return "/".join([
        coord.group.replace(".", "/"),
        coord.artifact,
        coord.version,
        artifact_filename(coord, classifier),
    ])


class LocalPathResolver:
    """本地仓库路径解析器"""

    def __init__(self, repo_root: str = "") -> None:
        self.repo_root = repo_root or default_local_repo()

    def expected_path(self, coord: Coordinate, repo_root: str = "") -> str:
        """坐标在本地仓库中应处的位置，即使文件不存在也返回"""
        root = (repo_root or self.repo_root).rstrip("/")
        return f"{root}/{relative_artifact_path(coord)}"

    @staticmethod
    def local_file_exists(record: DependencyRecord) -> bool:
        return bool(record.local_path) and Path(record.local_path).is_file()

    def actual_or_expected_path(self, record: DependencyRecord) -> str:
        if self.local_file_exists(record):
            return record.local_path
        return self.expected_path(record.coordinate)

    def annotate(self, record: DependencyRecord) -> DependencyRecord:
        """填充 local_path（文件存在时为实际路径，否则为空）与 expected_path"""
        path = self.expected_path(record.coordinate)
        record.local_path = path if Path(path).is_file() else ""
        record.expected_path = self.actual_or_expected_path(record)
        return record
