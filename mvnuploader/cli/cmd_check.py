"""CLI：私仓预检查与上传命令"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from mvnuploader.cli import _abort, _svc
from mvnuploader.core.exceptions import UploaderError
from mvnuploader.core.models import CheckStatus, DependencySnapshot
from mvnuploader.core.status_board import StatusBoard
from mvnuploader.utils.yaml_io import save_yaml

logger = logging.getLogger(__name__)


def register(group: click.Group) -> None:
    group.add_command(check)
    group.add_command(upload)


def _scan_and_check(
    root_pom: Path, workers: int | None, expand_poms: bool | None,
    timeout: float | None = None,
) -> tuple[DependencySnapshot, StatusBoard]:
    svc = _svc().analysis
    if timeout:
        svc.checker.timeout = timeout
    snapshot = svc.scan(root_pom, expand_poms=expand_poms)
    board = StatusBoard(snapshot.records)
    summary = svc.check(snapshot, concurrency=workers, on_update=board.apply)
    click.echo(
        f"检查完成: 已存在={summary.exists} 缺失={summary.missing} "
        f"错误={summary.errors}"
    )
    return snapshot, board


@click.command()
@click.argument("root_pom", default="pom.xml", type=click.Path(path_type=Path))
@click.option("--workers", "-w", type=int, default=None, help="并发检查数（默认取配置）")
@click.option("--timeout", type=float, default=None, help="单次检查超时秒数（默认取配置）")
@click.option("--output", "-o", default="", help="检查结果输出 YAML 文件")
@click.option("--expand-poms/--no-expand-poms", default=None, help="递归展开 parent / BOM 坐标")
@click.option("--fail-on-missing", is_flag=True, help="存在缺失或错误时以退出码 2 结束")
def check(
    root_pom: Path, workers: int | None, timeout: float | None, output: str,
    expand_poms: bool | None, fail_on_missing: bool,
) -> None:
    """扫描项目并检查每个依赖是否已存在于私仓"""
    try:
        snapshot, board = _scan_and_check(root_pom, workers, expand_poms, timeout)
    except UploaderError as e:
        raise _abort(e) from e

    for update in board.view().values():
        if update.status is CheckStatus.MISSING:
            click.echo(f"  [缺失] {update.coordinate.full}")
        elif update.status is CheckStatus.ERROR:
            click.echo(f"  [错误] {update.coordinate.full}: {update.error_message}")

    if output:
        save_yaml(output, snapshot.to_dict())
        click.echo(f"检查结果已写入: {output}")

    counts = board.counts()
    if fail_on_missing and (counts[CheckStatus.MISSING.value] or counts[CheckStatus.ERROR.value]):
        raise SystemExit(2)


@click.command()
@click.argument("root_pom", default="pom.xml", type=click.Path(path_type=Path))
@click.option("--workers", "-w", type=int, default=None, help="并发检查数（默认取配置）")
@click.option("--upload-workers", type=int, default=None, help="并发上传数（默认取配置）")
@click.option("--dry-run", is_flag=True, help="只列出将要上传的依赖")
def upload(
    root_pom: Path, workers: int | None, upload_workers: int | None, dry_run: bool,
) -> None:
    """检查后上传私仓中缺失、且本地存在的依赖"""
    try:
        snapshot, _ = _scan_and_check(root_pom, workers, None)
    except UploaderError as e:
        raise _abort(e) from e

    targets = []
    for r in snapshot.records:
        if not r.selected:
            continue
        if not r.local_path:
            click.echo(f"  [跳过] 本地不存在: {r.coordinate.full} (预期路径 {r.expected_path})")
            continue
        targets.append(r)

    if not targets:
        click.echo("没有需要上传的依赖。")
        return
    if dry_run:
        for r in targets:
            click.echo(f"  [待上传] {r.coordinate.full} <- {r.local_path}")
        return

    def progress(gav: str, current: int, total: int) -> None:
        click.echo(f"  ({current}/{total}) {gav}")

    try:
        summary = _svc().analysis.upload(
            snapshot, records=targets, concurrency=upload_workers, on_progress=progress,
        )
    except UploaderError as e:
        raise _abort(e) from e

    click.echo(
        f"上传完成: 总数={summary.total} 成功={summary.success} 失败={summary.failure}"
    )
    for r in summary.failed:
        click.echo(f"  [失败] {r.coordinate.full}: {r.error_message}")
    if summary.has_failures:
        raise SystemExit(1)
