"""仓库路径规范化

所有外部传入的仓库标识在作为注册表键、目录名或比较对象之前，
都必须经过 normalize_repo_path 转换为 owner/name 形式。

支持的输入:
  - owner/name                       （已规范）
  - git@host:owner/name[.git]        （SSH）
  - https://host/owner/name[.git]    （HTTPS，以及 ssh:// / git:// 形式）
"""

from __future__ import annotations

from gitdeps.core.exceptions import InvalidRepositoryPathError

_GIT_SUFFIX = ".git"
_DIR_SEPARATOR = "."
_URL_SCHEMES = ("http", "https", "ssh", "git")


def normalize_repo_path(text: str | None) -> str | None:
    """将仓库标识转换为 owner/name，无法识别时返回 None"""
    if text is None:
        return None
    value = text.strip()
    if not value:
        return None

    if value.endswith(_GIT_SUFFIX):
        value = value[: -len(_GIT_SUFFIX)]

    # 已是规范形式: 无协议/主机，恰好一个分隔符
    if "://" not in value and not value.startswith("git@") and value.count("/") == 1:
        return _checked(value)

    # SSH: git@host:owner/name
    if value.startswith("git@"):
        _, sep, tail = value.partition(":")
        return _checked(tail) if sep else None

    # HTTPS: https://host/owner/name
    scheme, sep, rest = value.partition("://")
    if sep and scheme.lower() in _URL_SCHEMES:
        _host, slash, tail = rest.partition("/")
        return _checked(tail.rstrip("/")) if slash else None

    return None


def _checked(candidate: str) -> str | None:
    owner, sep, name = candidate.partition("/")
    if not sep or not owner or not name or "/" in name:
        return None
    if owner.strip() != owner or name.strip() != name:
        return None
    return candidate


def require_repo_path(text: str | None) -> str:
    """同 normalize_repo_path，无法识别时抛 InvalidRepositoryPathError"""
    path = normalize_repo_path(text)
    if path is None:
        raise InvalidRepositoryPathError(f"无效的仓库路径: {text!r}")
    return path


def repo_key(path: str) -> str:
    """大小写不敏感的比较键"""
    return path.casefold()


def same_repo(a: str, b: str) -> bool:
    return repo_key(a) == repo_key(b)


def package_dir_name(path: str) -> str:
    """规范路径对应的包目录名: owner/name -> owner.name"""
    return path.replace("/", _DIR_SEPARATOR)
