"""mvnuploader 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from typing import Any

import click
import yaml

from mvnuploader import __version__
from mvnuploader.core.config import DEFAULT_CONFIG_PATH, init_config
from mvnuploader.core.exceptions import UploaderError
from mvnuploader.services.container import get_container, reset_container
from mvnuploader.utils.logger import setup_logging_from_env


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


def _abort(exc: UploaderError) -> click.ClickException:
    """业务异常转换为 click 错误（退出码 1）"""
    return click.ClickException(f"[{exc.code}] {exc}")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_PATH, help="配置文件路径")
def main(config_path: str) -> None:
    """mvnuploader - Maven 多模块依赖私仓预检查与上传"""
    setup_logging_from_env()
    try:
        init_config(config_path)
    except (UploaderError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"加载配置失败: {e}") from e
    reset_container()


# 注册各领域子命令
from mvnuploader.cli.cmd_scan import register as _reg_scan  # noqa: E402
from mvnuploader.cli.cmd_check import register as _reg_check  # noqa: E402
from mvnuploader.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_scan(main)
_reg_check(main)
_reg_misc(main)
