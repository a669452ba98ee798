"""CLI：模块扫描与路径查询命令"""

from __future__ import annotations

from pathlib import Path

import click

from mvnuploader.cli import _abort, _svc
from mvnuploader.core.exceptions import UploaderError
from mvnuploader.core.local_repo import LocalPathResolver, default_local_repo
from mvnuploader.core.models import Coordinate


def register(group: click.Group) -> None:
    group.add_command(scan)
    group.add_command(expected_path)


@click.command()
@click.argument("root_pom", default="pom.xml", type=click.Path(path_type=Path))
@click.option("--list", "show_list", is_flag=True, help="列出全部依赖坐标")
@click.option("--expand-poms/--no-expand-poms", default=None, help="递归展开 parent / BOM 坐标（默认取配置）")
def scan(root_pom: Path, show_list: bool, expand_poms: bool | None) -> None:
    """扫描多模块项目，收集全部模块与依赖坐标（不访问私仓）"""
    try:
        snapshot = _svc().analysis.scan(root_pom, expand_poms=expand_poms)
    except UploaderError as e:
        raise _abort(e) from e

    click.echo(f"模块 ({len(snapshot.modules)}):")
    for m in snapshot.modules:
        click.echo(f"  {m}")
    if snapshot.warnings:
        click.echo(f"\n告警 ({len(snapshot.warnings)}):")
        for w in snapshot.warnings:
            click.echo(f"  [{w.kind}] {w.path}: {w.message}")

    local = sum(1 for r in snapshot.records if r.local_path)
    click.echo(f"\n依赖坐标: {len(snapshot.records)}  本地已存在: {local}")
    if show_list:
        for r in snapshot.records:
            marker = "L" if r.local_path else "-"
            click.echo(f"  [{marker}] {r.coordinate.full}  {r.expected_path}")


@click.command(name="path")
@click.argument("coordinate")
@click.option("--repo-root", default="", help="本地仓库根目录（默认按配置 / 环境推导）")
def expected_path(coordinate: str, repo_root: str) -> None:
    """输出坐标在本地仓库中的预期路径"""
    try:
        coord = Coordinate.parse(coordinate)
    except UploaderError as e:
        raise _abort(e) from e
    resolver = LocalPathResolver(default_local_repo(repo_root or _svc().config.local_repo))
    path = resolver.expected_path(coord)
    exists = Path(path).is_file()
    click.echo(f"{path}{'' if exists else '  (本地不存在)'}")
