"""依赖包数据模型

数据类:
- PackageMetadata: 包自身发布的元数据（package.json）
- InstallState: 包在本地的安装状态
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import semantic_version as semver

from gitdeps.core.exceptions import ManifestUnparsableError

_TEXT_FIELDS = ("name", "description", "author", "iconurl", "license", "homepage")


@dataclass
class PackageMetadata:
    """单个依赖包的元信息"""

    name: str = ""
    description: str = ""
    author: str = ""
    iconurl: str = ""
    license: str = ""
    repository: str = ""      # repository.url，安装后为规范路径 owner/name
    homepage: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)  # 仓库路径 -> 版本范围

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "") -> PackageMetadata:
        """从 package.json 内容构造，字段类型不符时抛 ManifestUnparsableError"""
        where = f" ({source})" if source else ""
        values: dict[str, Any] = {}
        for key in _TEXT_FIELDS:
            value = data.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ManifestUnparsableError(f"字段 '{key}' 不是字符串{where}")
            values[key] = value

        repo = data.get("repository") or {}
        if isinstance(repo, str):
            repo_url = repo
        elif isinstance(repo, dict):
            repo_url = repo.get("url", "") or ""
        else:
            raise ManifestUnparsableError(f"字段 'repository' 格式错误{where}")
        if not isinstance(repo_url, str):
            raise ManifestUnparsableError(f"字段 'repository.url' 不是字符串{where}")

        deps = data.get("dependencies") or {}
        if not isinstance(deps, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in deps.items()
        ):
            raise ManifestUnparsableError(
                f"字段 'dependencies' 必须是 仓库路径 -> 版本范围 的映射{where}"
            )

        return cls(repository=repo_url, dependencies=dict(deps), **values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "iconurl": self.iconurl,
            "license": self.license,
            "repository": {"url": self.repository},
            "homepage": self.homepage,
            "dependencies": dict(self.dependencies),
        }


class InstallStatus(str, Enum):
    INSTALLED = "installed"
    NOT_INSTALLED = "not_installed"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class InstallState:
    """本地安装状态: 已安装(带版本) / 未安装 / 损坏（目录存在但无法确定版本）"""

    status: InstallStatus
    version: semver.Version | None = None

    @classmethod
    def installed(cls, version: semver.Version) -> InstallState:
        return cls(InstallStatus.INSTALLED, version)

    @classmethod
    def not_installed(cls) -> InstallState:
        return cls(InstallStatus.NOT_INSTALLED)

    @classmethod
    def corrupt(cls) -> InstallState:
        return cls(InstallStatus.CORRUPT)

    @property
    def is_installed(self) -> bool:
        return self.status is InstallStatus.INSTALLED

    @property
    def is_corrupt(self) -> bool:
        return self.status is InstallStatus.CORRUPT
