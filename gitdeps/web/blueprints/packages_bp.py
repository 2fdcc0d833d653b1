"""依赖包 API Blueprint"""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, Response, jsonify, request

from gitdeps.web.responses import bad_request, not_found

packages_bp = Blueprint("packages", __name__, url_prefix="/api/packages")


def _svc():  # type: ignore[no-untyped-def]
    from gitdeps.services.container import get_container
    return get_container()


def _package_json(meta) -> dict:  # type: ignore[no-untyped-def]
    data = meta.to_dict()
    version = _svc().installer.installed_version(meta.repository)
    data["version"] = str(version) if version is not None else None
    return data


@packages_bp.route("", methods=["GET"])
def list_all() -> Response:
    packages = sorted(_svc().registry.all(), key=lambda m: m.repository.casefold())
    return jsonify(packages=[_package_json(p) for p in packages])


@packages_bp.route("/<owner>/<name>", methods=["GET"])
def get(owner: str, name: str) -> tuple[Response, int] | Response:
    meta = _svc().registry.get(f"{owner}/{name}")
    if meta is None:
        return not_found("依赖包")
    return jsonify(package=_package_json(meta))


@packages_bp.route("", methods=["POST"])
def install() -> tuple[Response, int] | Response:
    body = request.get_json(silent=True) or {}
    repo = body.get("repo", "")
    if not repo:
        return bad_request("需要提供 repo")
    version_range = body.get("range", "*")
    meta = _svc().installer.install(repo, version_range)
    return jsonify(message=f"已安装: {meta.repository}", package=_package_json(meta))


@packages_bp.route("/<owner>/<name>", methods=["DELETE"])
def uninstall(owner: str, name: str) -> Response:
    repo = f"{owner}/{name}"
    _svc().installer.uninstall(repo)
    return jsonify(message=f"已卸载: {repo}")


@packages_bp.route("/validate", methods=["POST"])
def validate() -> Response:
    report = _svc().validator.validate_all()
    return jsonify(report=asdict(report), changed=report.changed)
