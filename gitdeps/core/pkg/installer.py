"""单个依赖包的安装 / 卸载

install 流程:
  1. 规范化仓库路径
  2. 列出远程标签，选出满足范围的最大版本（无则 NoSatisfyingVersionError）
  3. 计算目标目录 <packages_dir>/<owner>.<name>（小写）
  4. 已安装且版本语义相等 → 直接返回注册表条目（不做 clone/checkout）
  5. 未安装则 clone；随后 fetch --tags，强制 checkout 目标标签
  6. 读取并解析 package.json
  7. 元数据声明的仓库必须与请求的仓库一致（大小写不敏感）
  8. 写入注册表并返回
  9. 5~8 任一步失败 → uninstall 清理残留后原样抛出

install / uninstall 全程持有进程级包操作锁。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import semantic_version as semver

from gitdeps.core.exceptions import (
    CorruptInstallationError,
    NoSatisfyingVersionError,
    RepositoryMismatchError,
    VersionParseError,
)
from gitdeps.core.pkg.lock import serialized
from gitdeps.core.pkg.manifest import read_metadata
from gitdeps.core.pkg.models import InstallState, PackageMetadata
from gitdeps.core.pkg.paths import (
    normalize_repo_path,
    package_dir_name,
    repo_key,
    require_repo_path,
    same_repo,
)
from gitdeps.core.pkg.versions import best_match, parse_range, parse_version, tags_to_versions
from gitdeps.utils.fs import remove_tree

if TYPE_CHECKING:
    from gitdeps.core.config import Config
    from gitdeps.core.pkg.registry import PackageRegistry
    from gitdeps.core.protocols import VersionControl

logger = logging.getLogger(__name__)


class Installer:
    """依赖包安装器 - 每个包目录归本类独占"""

    def __init__(
        self,
        registry: PackageRegistry,
        git: VersionControl,
        packages_dir: str | Path = "",
        config: Config | None = None,
    ) -> None:
        if config is None:
            from gitdeps.core.config import get_config
            config = get_config()
        self.registry = registry
        self.git = git
        self.config = config
        self.packages_dir = Path(packages_dir or config.packages_dir)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def package_dir(self, repo: str) -> Path:
        """规范路径对应的包目录

        目录名由大小写不敏感的仓库键生成（owner/Name -> owner.name），
        同一仓库的不同大小写写法总是落到同一个目录。已存在仅大小写不同的
        旧目录时沿用该目录。
        """
        name = package_dir_name(repo_key(require_repo_path(repo)))
        target = self.packages_dir / name
        if target.exists() or not self.packages_dir.is_dir():
            return target
        for child in sorted(self.packages_dir.iterdir()):
            if child.is_dir() and child.name.casefold() == name:
                return child
        return target

    def remote_versions(self, repo: str) -> dict[semver.Version, str]:
        """远程可用版本 -> 标签名"""
        path = require_repo_path(repo)
        tags = self.git.list_remote_tags(self.config.remote_url(path))
        return tags_to_versions(tags)

    def available_versions(self, repo: str) -> list[semver.Version]:
        return sorted(self.remote_versions(repo))

    def installed_state(self, repo: str) -> InstallState:
        """通过 HEAD 上的标签判断当前检出的版本

        目录不存在 → 未安装；目录存在但标签无法解析为语义版本 → 损坏。
        """
        target = self.package_dir(repo)
        if not target.exists():
            return InstallState.not_installed()
        tag = self.git.describe_tag(target)
        if tag is None:
            return InstallState.corrupt()
        try:
            return InstallState.installed(parse_version(tag))
        except VersionParseError:
            logger.warning("当前检出的标签不是语义版本: %s (%s)", tag, target.name)
            return InstallState.corrupt()

    def installed_version(self, repo: str) -> semver.Version | None:
        return self.installed_state(repo).version

    # ------------------------------------------------------------------
    # 安装 / 卸载
    # ------------------------------------------------------------------

    @serialized
    def install(self, repo: str, version_range: str) -> PackageMetadata:
        """安装满足范围的最新版本，返回包元数据"""
        path = require_repo_path(repo)
        rng = parse_range(version_range)

        versions = self.remote_versions(path)
        best = best_match(versions, rng)
        if best is None:
            raise NoSatisfyingVersionError(path, version_range)
        tag = versions[best]

        target = self.package_dir(path)
        state = self.installed_state(path)
        if state.is_installed and state.version == best:
            existing = self.registry.get(path)
            if existing is not None:
                logger.info("已是最佳匹配版本，跳过: %s@%s", path, best)
                return existing

        logger.info("安装 %s@%s (范围 %s) -> %s", path, best, version_range, target)
        try:
            if not state.is_installed:
                if state.is_corrupt and not remove_tree(
                    target,
                    attempts=self.config.delete_attempts,
                    delay=self.config.delete_delay,
                ):
                    raise CorruptInstallationError(f"无法清理损坏的包目录: {target}")
                self.packages_dir.mkdir(parents=True, exist_ok=True)
                self.git.clone(self.config.remote_url(path), target)
            self.git.fetch_tags(target)
            self.git.checkout_tag(target, tag)
            metadata = self._read_verified_metadata(path, target)
            self.registry.put(path, metadata)
        except Exception:
            logger.error("安装失败，回滚: %s", path)
            self.uninstall(path)
            raise

        logger.info("已安装 %s@%s", path, best)
        return metadata

    @serialized
    def uninstall(self, repo: str) -> None:
        """删除包目录与注册表条目；未安装时什么也不做"""
        path = require_repo_path(repo)
        target = self.package_dir(path)
        existed = target.exists()
        remove_tree(
            target,
            attempts=self.config.delete_attempts,
            delay=self.config.delete_delay,
        )
        registered = self.registry.remove(path)
        if existed or registered:
            logger.info("已卸载 %s", path)

    def _read_verified_metadata(self, path: str, target: Path) -> PackageMetadata:
        metadata = read_metadata(target / self.config.metadata_name)
        declared = normalize_repo_path(metadata.repository)
        if declared is None or not same_repo(declared, path):
            raise RepositoryMismatchError(
                expected=path, declared=declared or metadata.repository,
            )
        metadata.repository = path
        return metadata
