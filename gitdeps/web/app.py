"""轻量级 Web API（基于 Flask）

提供：已安装包查询、安装 / 卸载、依赖清单校验。

启动方式: gitdeps serve --port 8888
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from gitdeps.core.exceptions import GitDepsError
from gitdeps.web.blueprints.packages_bp import packages_bp
from gitdeps.web.responses import business_error

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.register_blueprint(packages_bp)


# =========================================================================
# 全局 JSON 错误处理
# =========================================================================


@app.errorhandler(GitDepsError)
def handle_business_error(exc: GitDepsError):
    """业务异常按错误码映射状态码"""
    logger.warning("请求失败 [%s]: %s", exc.code, exc)
    return business_error(exc)


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return jsonify(error=exc.description), exc.code


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常，返回 500 JSON"""
    logger.exception("未处理的异常")
    return jsonify(error="服务器内部错误"), 500


@app.route("/api/health")
def health():
    from gitdeps import __version__
    return jsonify(status="ok", version=__version__)


def run_server(host: str = "127.0.0.1", port: int = 8888) -> None:
    logger.info("Web API 启动: http://%s:%d", host, port)
    app.run(host=host, port=port)
