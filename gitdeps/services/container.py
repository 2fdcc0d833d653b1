"""服务容器 — 一个容器即一个包管理会话

注册表、git 协作者、安装器、校验器都由容器懒加载并共享，
同一容器内的实例共享同一个注册表；不同容器（如并行测试）互不干扰。
CLI 和 Web 层均通过 get_container() 获取服务，而非直接构造。

依赖关系图（→ 表示依赖）:
  validator → installer → registry, git

用法:
    container = ServiceContainer()
    container.load_packages()
    container.installer.install("owner/name", "^1.0.0")

    # 显式注入配置
    cfg = Config.from_file("gitdeps.yml")
    container = ServiceContainer(config=cfg)
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gitdeps.core.config import Config
    from gitdeps.core.pkg.installer import Installer
    from gitdeps.core.pkg.registry import PackageRegistry
    from gitdeps.core.pkg.validator import DependencyValidator
    from gitdeps.core.protocols import VersionControl

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器 — 每个实例持有一组共享的服务"""

    def __init__(
        self,
        config: Config | None = None,
        git: VersionControl | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from gitdeps.core.config import get_config
            config = get_config()
        self._config = config
        if git is not None:
            self._instances["git"] = git

    @property
    def config(self) -> Config:
        return self._config

    @property
    def packages_dir(self) -> Path:
        return Path(self._config.packages_dir)

    @property
    def registry(self) -> PackageRegistry:
        if "registry" not in self._instances:
            from gitdeps.core.pkg.registry import PackageRegistry
            self._instances["registry"] = PackageRegistry(
                metadata_name=self._config.metadata_name,
            )
        return self._instances["registry"]  # type: ignore[return-value]

    @property
    def git(self) -> VersionControl:
        if "git" not in self._instances:
            from gitdeps.core.pkg.git import GitClient
            self._instances["git"] = GitClient(timeout=self._config.git_timeout)
        return self._instances["git"]  # type: ignore[return-value]

    @property
    def installer(self) -> Installer:
        if "installer" not in self._instances:
            from gitdeps.core.pkg.installer import Installer
            self._instances["installer"] = Installer(
                registry=self.registry,
                git=self.git,
                packages_dir=self.packages_dir,
                config=self._config,
            )
        return self._instances["installer"]  # type: ignore[return-value]

    @property
    def validator(self) -> DependencyValidator:
        if "validator" not in self._instances:
            from gitdeps.core.pkg.validator import DependencyValidator
            self._instances["validator"] = DependencyValidator(
                installer=self.installer,
                manifest_path=self.packages_dir / self._config.manifest_name,
                config=self._config,
            )
        return self._instances["validator"]  # type: ignore[return-value]

    def load_packages(self) -> int:
        """从磁盘重建注册表，返回已安装包数量"""
        return self.registry.load(self.packages_dir)


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全），首次创建时加载已安装包"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            container = ServiceContainer()
            container.load_packages()
            _global = container
        return _global


def set_container(container: ServiceContainer) -> None:
    """替换全局容器（测试或嵌入场景）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = container


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
