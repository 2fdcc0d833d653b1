"""依赖清单与包元数据文件读写

- Packages.json: 项目顶层依赖清单，仓库路径 -> 版本范围
- package.json: 每个包根目录下的元数据
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from gitdeps.core.exceptions import ManifestMissingError, ManifestUnparsableError
from gitdeps.core.pkg.models import PackageMetadata
from gitdeps.core.pkg.paths import normalize_repo_path, repo_key
from gitdeps.utils.json_io import load_json_object, save_json

logger = logging.getLogger(__name__)


def read_metadata(path: Path) -> PackageMetadata:
    """读取并解析 package.json"""
    if not path.is_file():
        raise ManifestMissingError(f"缺少包元数据文件: {path}")
    try:
        data = load_json_object(path)
    except (ValueError, UnicodeDecodeError) as e:
        raise ManifestUnparsableError(f"包元数据无法解析: {path} - {e}") from e
    return PackageMetadata.from_dict(data, source=str(path))


class DependencyManifest:
    """顶层依赖清单（Packages.json）

    保持文件中的键顺序；每次修改后由调用方立即 save()。
    键按原样保存，查找时按规范路径大小写不敏感匹配。
    """

    def __init__(self, path: Path, entries: dict[str, str] | None = None) -> None:
        self.path = path
        self._entries: dict[str, str] = dict(entries or {})

    @classmethod
    def load(cls, path: Path) -> DependencyManifest:
        """读取清单，文件不存在时返回空清单"""
        if not path.exists():
            logger.info("依赖清单不存在，视为空: %s", path)
            return cls(path)
        try:
            data = load_json_object(path)
        except (ValueError, UnicodeDecodeError) as e:
            raise ManifestUnparsableError(f"依赖清单无法解析: {path} - {e}") from e
        bad = [k for k, v in data.items() if not isinstance(v, str)]
        if bad:
            raise ManifestUnparsableError(
                f"依赖清单中版本范围必须是字符串: {', '.join(bad)}"
            )
        return cls(path, data)

    def save(self) -> None:
        save_json(self.path, self._entries)
        logger.info("依赖清单已保存: %s (%d 项)", self.path, len(self._entries))

    def find_key(self, repo: str) -> str | None:
        """按规范路径查找清单中已有的键（原样返回），不存在返回 None"""
        canonical = normalize_repo_path(repo)
        if canonical is None:
            return None
        wanted = repo_key(canonical)
        for key in self._entries:
            path = normalize_repo_path(key)
            if path is not None and repo_key(path) == wanted:
                return key
        return None

    def get(self, repo: str) -> str | None:
        key = self.find_key(repo)
        return self._entries[key] if key is not None else None

    def set(self, repo: str, version_range: str) -> None:
        """设置版本范围；已有条目沿用原键，新条目以 repo 原样作为键"""
        key = self.find_key(repo) or repo
        self._entries[key] = version_range

    def remove(self, repo: str) -> bool:
        key = self.find_key(repo)
        if key is None:
            return False
        del self._entries[key]
        return True

    def items(self) -> list[tuple[str, str]]:
        """当前条目的快照（遍历期间允许修改清单）"""
        return list(self._entries.items())

    def to_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, repo: object) -> bool:
        return isinstance(repo, str) and self.find_key(repo) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
