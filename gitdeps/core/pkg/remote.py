"""远程包元数据查询

不克隆仓库，直接从原始内容地址下载 package.json，用于安装前预览。
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from gitdeps.core.exceptions import RemoteMetadataError, ValidationError
from gitdeps.core.pkg.models import PackageMetadata
from gitdeps.core.pkg.paths import require_repo_path

if TYPE_CHECKING:
    from gitdeps.core.config import Config

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))
_MAX_METADATA_BYTES = 1024 * 1024


def metadata_url(repo: str, ref: str, config: Config) -> str:
    """拼出 package.json 的原始内容地址，仅允许 http/https"""
    url = config.raw_url_template.format(
        repo=require_repo_path(repo), ref=ref, file=config.metadata_name,
    )
    scheme = urlparse(url).scheme
    if scheme not in _ALLOWED_SCHEMES:
        raise ValidationError(f"不允许的 URL 协议 '{scheme}'，仅支持 http/https: {url}")
    return url


def fetch_remote_metadata(
    repo: str, ref: str = "master", config: Config | None = None, timeout: int = 30,
) -> PackageMetadata:
    """下载并解析远程 package.json"""
    if config is None:
        from gitdeps.core.config import get_config
        config = get_config()
    url = metadata_url(repo, ref, config)
    logger.info("获取远程元数据: %s", url)
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:  # nosec B310
            raw = resp.read(_MAX_METADATA_BYTES + 1)
    except (urllib.error.HTTPError, urllib.error.URLError, OSError) as e:
        raise RemoteMetadataError(f"获取 package.json 失败: {url} - {e}") from e
    if len(raw) > _MAX_METADATA_BYTES:
        raise RemoteMetadataError(f"package.json 过大: {url}")

    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RemoteMetadataError(f"package.json 无法解析: {url} - {e}") from e
    if not isinstance(data, dict):
        raise RemoteMetadataError(f"package.json 顶层不是 JSON 对象: {url}")
    return PackageMetadata.from_dict(data, source=url)
