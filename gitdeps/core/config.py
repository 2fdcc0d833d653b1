"""集中配置管理

替代各模块散落的 DEFAULT_* 常量，提供统一的配置入口。
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from gitdeps.core.exceptions import ConfigError
from gitdeps.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """引擎全局配置"""

    # 目录与文件
    packages_dir: str = "Packages"
    manifest_name: str = "Packages.json"
    metadata_name: str = "package.json"

    # 远程仓库
    git_host: str = "https://github.com"
    raw_url_template: str = (
        "https://raw.githubusercontent.com/{repo}/refs/heads/{ref}/{file}"
    )
    git_timeout: int | None = None

    # 目录删除重试
    delete_attempts: int = 10
    delete_delay: float = 0.1

    # 依赖校验最大轮数
    max_validation_passes: int = 32

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.delete_attempts < 1:
            raise ConfigError(f"delete_attempts 必须 >= 1: {self.delete_attempts}")
        if self.max_validation_passes < 1:
            raise ConfigError(
                f"max_validation_passes 必须 >= 1: {self.max_validation_passes}"
            )

    @classmethod
    def from_file(cls, path: str = "gitdeps.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件内容无效: {path} - {e}") from e
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)

    def remote_url(self, repo: str) -> str:
        """规范路径 owner/name 对应的 git 远程地址"""
        return f"{self.git_host.rstrip('/')}/{repo}.git"


# 全局单例，首次 import 时不加载文件；由 CLI / Web 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "gitdeps.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
