"""共享测试夹具 — 内存版 git 协作者

FakeGit 按 远程地址 -> {标签: package.json 内容} 提供带标签的包，
clone / checkout 在本地目录中写出对应的文件树，并记录每次调用。
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

import pytest

from gitdeps.core.config import Config
from gitdeps.core.exceptions import ExternalProcessError
from gitdeps.services.container import ServiceContainer

GIT_HOST = "https://git.example.com"

_MARKER_DIR = ".git"
_REMOTE_FILE = "remote"
_HEAD_FILE = "HEAD_TAG"


def package_json(
    repo: str,
    dependencies: dict[str, str] | None = None,
    *,
    name: str = "",
    repository_url: str | None = None,
) -> dict[str, Any]:
    """构造 package.json 内容，repository.url 默认使用 HTTPS 形式"""
    return {
        "name": name or repo.split("/")[-1],
        "description": f"{repo} 测试包",
        "author": "tester",
        "iconurl": "",
        "license": "MIT",
        "repository": {
            "url": repository_url if repository_url is not None else f"https://github.com/{repo}.git",
        },
        "homepage": "",
        "dependencies": dependencies or {},
    }


class FakeGit:
    """满足 VersionControl 协议的测试替身"""

    def __init__(self) -> None:
        # 远程地址 -> {标签: package.json 内容 (dict / 原始字符串 / None 表示不含元数据)}
        self.remotes: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []

    # ---- 测试数据 ----

    def add_package(
        self,
        repo: str,
        tag: str,
        metadata: Any = "default",
        dependencies: dict[str, str] | None = None,
    ) -> None:
        if metadata == "default":
            metadata = package_json(repo, dependencies)
        # 托管服务对 owner/name 大小写不敏感
        self.remotes.setdefault(f"{GIT_HOST}/{repo}.git".casefold(), {})[tag] = metadata

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)

    # ---- 协议实现 ----

    def _remote(self, url: str) -> dict[str, Any]:
        if url.casefold() not in self.remotes:
            raise ExternalProcessError(
                f"git 失败: repository '{url}' not found",
                stderr=f"fatal: repository '{url}' not found",
                returncode=128,
            )
        return self.remotes[url.casefold()]

    @staticmethod
    def _url_of(repo_dir: Path) -> str:
        marker = repo_dir / _MARKER_DIR / _REMOTE_FILE
        if not marker.is_file():
            raise ExternalProcessError("git 失败: not a git repository", stderr="fatal: not a git repository")
        return marker.read_text(encoding="utf-8")

    def clone(self, url: str, dest: Path) -> None:
        self.calls.append(("clone", url))
        self._remote(url)
        if dest.exists() and any(dest.iterdir()):
            raise ExternalProcessError("git clone 失败", stderr="destination path already exists")
        (dest / _MARKER_DIR).mkdir(parents=True)
        (dest / _MARKER_DIR / _REMOTE_FILE).write_text(url, encoding="utf-8")

    def fetch_tags(self, repo_dir: Path) -> None:
        self.calls.append(("fetch", str(repo_dir)))
        self._remote(self._url_of(repo_dir))

    def checkout_tag(self, repo_dir: Path, tag: str) -> None:
        self.calls.append(("checkout", tag))
        tags = self._remote(self._url_of(repo_dir))
        if tag not in tags:
            raise ExternalProcessError(
                f"git checkout 失败: pathspec 'tags/{tag}' did not match",
                stderr=f"error: pathspec 'tags/{tag}' did not match",
            )
        for child in repo_dir.iterdir():
            if child.name == _MARKER_DIR:
                continue
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()
        metadata = tags[tag]
        if isinstance(metadata, dict):
            (repo_dir / "package.json").write_text(json.dumps(metadata), encoding="utf-8")
        elif isinstance(metadata, str):
            (repo_dir / "package.json").write_text(metadata, encoding="utf-8")
        (repo_dir / "README.md").write_text(f"{tag}\n", encoding="utf-8")
        (repo_dir / _MARKER_DIR / _HEAD_FILE).write_text(tag, encoding="utf-8")

    def list_remote_tags(self, url: str) -> list[str]:
        self.calls.append(("ls-remote", url))
        return list(self._remote(url))

    def describe_tag(self, repo_dir: Path) -> str | None:
        self.calls.append(("describe", str(repo_dir)))
        head = repo_dir / _MARKER_DIR / _HEAD_FILE
        if not head.is_file():
            return None
        return head.read_text(encoding="utf-8")


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(
        packages_dir=str(tmp_path / "Packages"),
        git_host=GIT_HOST,
        delete_attempts=3,
        delete_delay=0,
    )


@pytest.fixture()
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture()
def container(config: Config, fake_git: FakeGit) -> ServiceContainer:
    return ServiceContainer(config=config, git=fake_git)


@pytest.fixture()
def packages_dir(config: Config) -> Path:
    return Path(config.packages_dir)


def write_manifest(packages_dir: Path, entries: dict[str, str]) -> Path:
    path = packages_dir / "Packages.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


def read_manifest(packages_dir: Path) -> dict[str, str]:
    return json.loads((packages_dir / "Packages.json").read_text(encoding="utf-8"))
