"""核心数据模型

坐标、依赖记录、检查状态、私仓配置及扫描/检查/上传的结果对象集中定义，
其他模块统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from mvnuploader.core.exceptions import ValidationError

DEFAULT_PACKAGING = "jar"
POM_FILENAME = "pom.xml"

# =========================================================================
# 坐标
# =========================================================================


@dataclass(frozen=True)
class Coordinate:
    """构件坐标 group:artifact:version:packaging

    不可变，相等性与哈希只取这四个字段，可以安全地作为 set / dict 的 key。
    """

    group: str
    artifact: str
    version: str
    packaging: str = DEFAULT_PACKAGING

    @property
    def gav(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"

    @property
    def full(self) -> str:
        return f"{self.gav}:{self.packaging}"

    @classmethod
    def parse(cls, text: str) -> Coordinate:
        """从 "g:a:v" 或 "g:a:v:packaging" 解析坐标"""
        parts = [p.strip() for p in text.strip().split(":")]
        if len(parts) not in (3, 4) or not all(parts):
            raise ValidationError(
                f"坐标格式错误: '{text}'，应为 groupId:artifactId:version[:packaging]"
            )
        return cls(*parts)

    def __str__(self) -> str:
        return self.gav


class CheckStatus(str, Enum):
    """依赖检查状态

    UNKNOWN → CHECKING → {EXISTS, MISSING, ERROR}；
    任何状态都可以因重新检查回到 CHECKING，终态之间不能直接迁移。
    """

    UNKNOWN = "unknown"
    CHECKING = "checking"
    EXISTS = "exists"
    MISSING = "missing"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (CheckStatus.EXISTS, CheckStatus.MISSING, CheckStatus.ERROR)

    def can_transition(self, target: CheckStatus) -> bool:
        if target is CheckStatus.CHECKING:
            return True
        if target.is_terminal:
            return self is CheckStatus.CHECKING
        return False


@dataclass(eq=False)
class DependencyRecord:
    """单个坐标的依赖记录

    坐标不可变；local_path / status 等字段随检查推进原地更新。
    status 与 exists_in_remote 只由 AvailabilityChecker 写入，
    展示层只允许修改 selected。
    """

    coordinate: Coordinate
    local_path: str = ""
    expected_path: str = ""  # 本地仓库中应在的位置，文件不存在时也有值
    exists_in_remote: bool = False
    status: CheckStatus = CheckStatus.UNKNOWN
    selected: bool = False
    error_message: str = ""
    stack_trace: str = ""
    upload_url: str = ""

    @property
    def gav(self) -> str:
        return self.coordinate.gav

    def transition(self, target: CheckStatus) -> None:
        if not self.status.can_transition(target):
            raise ValidationError(
                f"非法状态迁移 {self.status.value} -> {target.value}: {self.gav}"
            )
        self.status = target

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyRecord):
            return NotImplemented
        return self.coordinate == other.coordinate

    def __hash__(self) -> int:
        return hash(self.coordinate)

    def to_dict(self) -> dict[str, Any]:
        c = self.coordinate
        return {
            "group": c.group,
            "artifact": c.artifact,
            "version": c.version,
            "packaging": c.packaging,
            "local_path": self.local_path,
            "expected_path": self.expected_path,
            "exists_in_remote": self.exists_in_remote,
            "status": self.status.value,
            "selected": self.selected,
            "error_message": self.error_message,
            "upload_url": self.upload_url,
        }


# =========================================================================
# 模块描述文件
# =========================================================================


@dataclass(frozen=True)
class ModuleDescriptorRef:
    """模块 pom.xml 的规范化绝对路径，作为扫描 visited 集合的 key"""

    path: Path

    @classmethod
    def of(cls, path: str | Path) -> ModuleDescriptorRef:
        return cls(Path(path).expanduser().resolve())

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class ScanWarning:
    """扫描过程中的非致命问题"""

    path: str
    message: str
    kind: str = "missing-module"  # "missing-module" | "resolution"


# =========================================================================
# 私仓配置
# =========================================================================


@dataclass
class RepositoryConfig:
    """私仓配置，只有 url / username / password 均非空时才视为有效"""

    url: str = ""
    username: str = ""
    password: str = ""
    repository_id: str = ""
    enabled: bool = True

    def is_valid(self) -> bool:
        return bool(self.url.strip() and self.username.strip() and self.password.strip())

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    @property
    def deploy_url(self) -> str:
        if self.repository_id.strip():
            return f"{self.base_url}/repository/{self.repository_id}/"
        return f"{self.base_url}/"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryConfig:
        return cls(
            url=str(data.get("url", "") or ""),
            username=str(data.get("username", "") or ""),
            password=str(data.get("password", "") or ""),
            repository_id=str(data.get("repository_id", "") or ""),
            enabled=bool(data.get("enabled", True)),
        )

    def to_dict(self, *, mask_password: bool = True) -> dict[str, Any]:
        return {
            "url": self.url,
            "username": self.username,
            "password": "******" if mask_password and self.password else self.password,
            "repository_id": self.repository_id,
            "enabled": self.enabled,
        }


# =========================================================================
# 事件与快照
# =========================================================================


@dataclass(frozen=True)
class StatusUpdate:
    """检查器发出的不可变状态事件，展示层据此维护自己的只读视图"""

    coordinate: Coordinate
    status: CheckStatus
    exists_in_remote: bool = False
    error_message: str = ""
    seq: int = 0


@dataclass
class DependencySnapshot:
    """一次扫描的结果快照

    每次重新扫描生成新快照（version 递增），不修改旧快照的集合。
    """

    version: int
    root: str
    modules: list[ModuleDescriptorRef] = field(default_factory=list)
    records: list[DependencyRecord] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)

    def find(self, coordinate: Coordinate) -> DependencyRecord | None:
        for r in self.records:
            if r.coordinate == coordinate:
                return r
        return None

    def selected(self) -> list[DependencyRecord]:
        return [r for r in self.records if r.selected]

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "root": self.root,
            "modules": [str(m) for m in self.modules],
            "warnings": [
                {"path": w.path, "message": w.message, "kind": w.kind}
                for w in self.warnings
            ],
            "records": [r.to_dict() for r in self.records],
        }


# =========================================================================
# 检查 / 上传结果
# =========================================================================


@dataclass
class CheckSummary:
    """一次批量检查的结果统计"""

    exists: int = 0
    missing: int = 0
    errors: int = 0
    cancelled: int = 0
    busy: int = 0  # 已有其他批次在检查而跳过的记录

    @property
    def total(self) -> int:
        return self.exists + self.missing + self.errors


@dataclass
class UploadResult:
    """单个构件的上传结果"""

    success: bool
    message: str
    url: str = ""


@dataclass
class UploadSummary:
    """批量上传汇总"""

    total: int = 0
    success: int = 0
    failure: int = 0
    failed: list[DependencyRecord] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return self.failure > 0

    @property
    def success_rate(self) -> float:
        return self.success / self.total if self.total else 0.0
