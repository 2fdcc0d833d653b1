"""已安装包注册表

职责:
- 从包目录重建内存索引（每个子目录的 package.json）
- 以规范仓库路径为键，大小写不敏感
- get / put / remove 不做任何磁盘 I/O，磁盘一致性由 Installer 维护
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitdeps.core.exceptions import ManifestUnparsableError, RepositoryMismatchError
from gitdeps.core.pkg.manifest import read_metadata
from gitdeps.core.pkg.models import PackageMetadata
from gitdeps.core.pkg.paths import normalize_repo_path, package_dir_name, repo_key, require_repo_path

logger = logging.getLogger(__name__)

DEFAULT_METADATA_NAME = "package.json"


class PackageRegistry:
    """已安装包注册表 - 规范路径 -> PackageMetadata"""

    def __init__(self, metadata_name: str = DEFAULT_METADATA_NAME) -> None:
        self.metadata_name = metadata_name
        # repo_key -> (规范路径, 元数据)
        self._entries: dict[str, tuple[str, PackageMetadata]] = {}

    def load(self, directory: Path) -> int:
        """扫描包目录的直接子目录，覆盖之前的全部状态，返回加载的包数量

        没有元数据文件的目录静默跳过；元数据声明的仓库与目录名不一致时
        抛 RepositoryMismatchError。
        """
        self._entries.clear()
        if not directory.is_dir():
            logger.warning("包目录不存在: %s", directory)
            return 0

        for pkg_dir in sorted(directory.iterdir()):
            if not pkg_dir.is_dir():
                continue
            metadata_file = pkg_dir / self.metadata_name
            if not metadata_file.is_file():
                continue
            try:
                metadata = read_metadata(metadata_file)
            except ManifestUnparsableError as e:
                logger.warning("跳过无法解析的包: %s - %s", pkg_dir.name, e)
                continue

            path = normalize_repo_path(metadata.repository)
            if path is None:
                logger.warning(
                    "跳过仓库路径无效的包: %s (repository=%r)",
                    pkg_dir.name, metadata.repository,
                )
                continue
            if package_dir_name(path).casefold() != pkg_dir.name.casefold():
                raise RepositoryMismatchError(
                    expected=pkg_dir.name, declared=path,
                )
            metadata.repository = path
            self._entries[repo_key(path)] = (path, metadata)

        logger.info("已加载 %d 个已安装包", len(self._entries))
        return len(self._entries)

    def get(self, path: str) -> PackageMetadata | None:
        entry = self._entries.get(repo_key(require_repo_path(path)))
        return entry[1] if entry else None

    def put(self, path: str, metadata: PackageMetadata) -> None:
        canonical = require_repo_path(path)
        self._entries[repo_key(canonical)] = (canonical, metadata)

    def remove(self, path: str) -> bool:
        """删除条目，不存在时返回 False"""
        return self._entries.pop(repo_key(require_repo_path(path)), None) is not None

    def all(self) -> list[PackageMetadata]:
        return [meta for _, meta in self._entries.values()]

    def paths(self) -> list[str]:
        return [path for path, _ in self._entries.values()]

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        canonical = normalize_repo_path(path)
        return canonical is not None and repo_key(canonical) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
