"""统一异常体系

所有业务异常继承 UploaderError。
CLI 层据此输出友好提示，Web 层据此映射为 JSON 错误响应。

扫描阶段的节点级问题（子模块缺失、模型构建失败）不抛异常，
而是记录为 ScanWarning 数据（见 models.py），扫描继续进行。
"""

from __future__ import annotations


class UploaderError(Exception):
    """工具基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(UploaderError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ConfigInvalidError(ConfigError):
    """私仓配置缺少必填项（url / username / password），批量检查直接失败"""

    code = "CONFIG_INVALID"


class ValidationError(UploaderError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ResolutionError(UploaderError):
    """POM 有效模型构建失败"""

    code = "RESOLUTION_ERROR"


class CheckError(UploaderError):
    """单个坐标的私仓存在性检查失败（网络 / 协议错误）"""

    code = "CHECK_ERROR"


class CheckTimeoutError(CheckError):
    """单个坐标的存在性检查超时"""

    code = "CHECK_TIMEOUT"
