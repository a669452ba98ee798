"""依赖分析 API Blueprint

职责:
- 扫描项目并替换当前快照
- 对当前快照执行私仓检查
- 查询依赖状态、勾选上传目标
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from flask import Blueprint, request

from mvnuploader import __version__
from mvnuploader.core.exceptions import UploaderError
from mvnuploader.core.models import CheckStatus, Coordinate
from mvnuploader.web.responses import bad_request, business_error, conflict, not_found, ok
from mvnuploader.web.state import holder

logger = logging.getLogger(__name__)

deps_bp = Blueprint("deps", __name__, url_prefix="/api")


def _safe_int(value: Any, default: int, lo: int = 1, hi: int = 256) -> int:
    """安全的整数转换，带范围校验"""
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return max(lo, min(n, hi))


def _analysis():
    from mvnuploader.services.container import get_container
    return get_container().analysis


@deps_bp.route("/health")
def api_health():
    return ok({"status": "ok", "version": __version__})


@deps_bp.route("/scan", methods=["POST"])
def api_scan():
    """扫描根 POM，生成新快照"""
    body = request.get_json(silent=True) or {}
    root_pom = str(body.get("root_pom", "")).strip()
    if not root_pom:
        return bad_request("需要提供 root_pom")
    expand = body.get("expand_poms")
    try:
        snapshot = _analysis().scan(
            root_pom, expand_poms=None if expand is None else bool(expand),
        )
    except UploaderError as e:
        return business_error(e)
    holder.replace(snapshot)
    return ok(snapshot.to_dict())


@deps_bp.route("/check", methods=["POST"])
def api_check():
    """对当前快照执行私仓检查（同步返回统计）

    请求体带 root_pom 时先重新扫描，再检查新快照。
    同一快照已在检查中时返回 409。
    """
    body = request.get_json(silent=True) or {}
    root_pom = str(body.get("root_pom", "")).strip()
    if root_pom:
        try:
            holder.replace(_analysis().scan(root_pom))
        except UploaderError as e:
            return business_error(e)
    snapshot, board = holder.current()
    if snapshot is None or board is None:
        return not_found("扫描快照")
    workers = body.get("workers")
    concurrency = None if workers is None else _safe_int(workers, default=10)
    if not holder.begin_check(snapshot.version):
        return conflict(f"快照 v{snapshot.version} 正在检查中")
    try:
        summary = _analysis().check(
            snapshot, concurrency=concurrency,
            cancel=threading.Event(), on_update=board.apply,
        )
    except UploaderError as e:
        return business_error(e)
    finally:
        holder.end_check(snapshot.version)
    return ok({
        "version": snapshot.version,
        "exists": summary.exists,
        "missing": summary.missing,
        "errors": summary.errors,
        "cancelled": summary.cancelled,
        "busy": summary.busy,
        "total": summary.total,
    })


@deps_bp.route("/records")
def api_records():
    """查询当前快照的依赖状态，可按 ?status= 过滤"""
    snapshot, board = holder.current()
    if snapshot is None or board is None:
        return not_found("扫描快照")
    wanted = request.args.get("status", "")
    if wanted and wanted not in {s.value for s in CheckStatus}:
        return bad_request(f"未知状态: {wanted}")

    view = board.view()
    records = []
    for r in snapshot.records:
        item = r.to_dict()
        update = view.get(r.coordinate)
        if update is not None:
            item["status"] = update.status.value
            item["exists_in_remote"] = update.exists_in_remote
            item["error_message"] = update.error_message
        if wanted and item["status"] != wanted:
            continue
        records.append(item)
    return ok({"version": snapshot.version, "counts": board.counts(), "records": records})


@deps_bp.route("/records/select", methods=["POST"])
def api_select():
    """勾选 / 取消勾选上传目标"""
    body = request.get_json(silent=True) or {}
    snapshot, _ = holder.current()
    if snapshot is None:
        return not_found("扫描快照")
    raw = body.get("coordinates")
    if not isinstance(raw, list) or not raw:
        return bad_request("coordinates 必须是非空列表")
    selected = bool(body.get("selected", True))

    changed: list[str] = []
    unknown: list[str] = []
    for text in raw:
        try:
            coord = Coordinate.parse(str(text))
        except UploaderError as e:
            return business_error(e)
        record = snapshot.find(coord)
        if record is None:
            unknown.append(str(text))
            continue
        record.selected = selected
        changed.append(record.coordinate.full)
    logger.info("快照 v%d: %d 个依赖 selected=%s", snapshot.version, len(changed), selected)
    return ok({"changed": changed, "unknown": unknown})
