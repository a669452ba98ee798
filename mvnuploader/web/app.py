"""轻量级 JSON API 服务（基于 Flask）

提供：健康检查、项目扫描、私仓检查、依赖状态查询与勾选。

启动方式: mvnuploader serve --port 8888
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from mvnuploader.core.exceptions import UploaderError
from mvnuploader.web.blueprints import deps_bp
from mvnuploader.web.responses import business_error

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH
app.register_blueprint(deps_bp)


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return jsonify(error=exc.description), exc.code


@app.errorhandler(UploaderError)
def handle_uploader_error(exc):
    return business_error(exc)


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常，返回 500 JSON"""
    logger.exception("未处理的异常")
    return jsonify(error="服务器内部错误"), 500


def run_server(port: int = 8888, debug: bool = False, host: str = "127.0.0.1") -> None:
    logger.info("API 服务启动: http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug, threaded=True)
