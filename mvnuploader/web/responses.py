"""Web 层统一响应辅助函数"""

from __future__ import annotations

from flask import Response, jsonify

from mvnuploader.core.exceptions import UploaderError


def ok(data: dict, status: int = 200) -> tuple[Response, int] | Response:
    """成功响应"""
    if status == 200:
        return jsonify(data)
    return jsonify(data), status


def not_found(resource: str) -> tuple[Response, int]:
    """资源不存在"""
    return jsonify(error=f"{resource}不存在"), 404


def bad_request(message: str) -> tuple[Response, int]:
    """请求参数错误"""
    return jsonify(error=message), 400


def business_error(exc: UploaderError) -> tuple[Response, int]:
    """业务异常统一映射为 400，附带错误码"""
    return jsonify(error=str(exc), code=exc.code), 400


def conflict(message: str) -> tuple[Response, int]:
    """资源状态冲突"""
    return jsonify(error=message), 409
