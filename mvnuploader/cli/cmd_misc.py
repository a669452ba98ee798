"""CLI：配置查看与 Web 服务命令"""

from __future__ import annotations

import click
import yaml

from mvnuploader.cli import _svc
from mvnuploader.core.local_repo import default_local_repo


def register(group: click.Group) -> None:
    group.add_command(config_show)
    group.add_command(serve)


@click.command(name="config-show")
def config_show() -> None:
    """显示当前生效配置（密码脱敏）"""
    cfg = _svc().config
    data = cfg.to_dict()
    data["local_repo"] = default_local_repo(cfg.local_repo)
    click.echo(yaml.dump(data, allow_unicode=True, sort_keys=False).rstrip())
    if not cfg.repository.is_valid():
        click.echo("\n警告: 私仓配置不完整（url / username / password 均不能为空）")


@click.command()
@click.option("--host", default="127.0.0.1", help="监听地址")
@click.option("--port", default=8888, help="监听端口")
def serve(host: str, port: int) -> None:
    """启动 JSON API 服务"""
    from mvnuploader.web.app import run_server
    run_server(host=host, port=port)
