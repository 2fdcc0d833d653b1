"""Web 层统一响应辅助函数"""

from __future__ import annotations

from flask import Response, jsonify

from gitdeps.core.exceptions import GitDepsError

# 错误码 -> HTTP 状态码，未列出的业务异常按 400 处理
_STATUS_BY_CODE = {
    "NO_SATISFYING_VERSION": 404,
    "REPOSITORY_MISMATCH": 409,
    "CORRUPT_INSTALLATION": 409,
    "DEPENDENCY_LOOP": 409,
    "EXTERNAL_PROCESS_ERROR": 502,
    "REMOTE_METADATA_ERROR": 502,
}


def not_found(resource: str) -> tuple[Response, int]:
    """资源不存在"""
    return jsonify(error=f"{resource}不存在"), 404


def bad_request(message: str) -> tuple[Response, int]:
    """请求参数错误"""
    return jsonify(error=message), 400


def business_error(exc: GitDepsError) -> tuple[Response, int]:
    """业务异常 → JSON，附带错误码"""
    status = _STATUS_BY_CODE.get(exc.code, 400)
    return jsonify(error=str(exc), code=exc.code), status
