"""Git 依赖包管理模块

拆分说明:
- paths.py: 仓库路径规范化
- versions.py: 语义版本与范围匹配
- models.py: 数据模型
- manifest.py: 依赖清单 / 包元数据读写
- registry.py: 已安装包注册表
- git.py: git 命令行协作者
- lock.py: 进程级包操作锁
- installer.py: 单包安装 / 卸载
- validator.py: 依赖清单校验与传递依赖收敛
- remote.py: 远程元数据查询
"""

from gitdeps.core.pkg.git import GitClient
from gitdeps.core.pkg.installer import Installer
from gitdeps.core.pkg.manifest import DependencyManifest
from gitdeps.core.pkg.models import InstallState, PackageMetadata
from gitdeps.core.pkg.paths import normalize_repo_path
from gitdeps.core.pkg.registry import PackageRegistry
from gitdeps.core.pkg.validator import DependencyValidator, ValidationReport

__all__ = [
    "DependencyManifest",
    "DependencyValidator",
    "GitClient",
    "InstallState",
    "Installer",
    "PackageMetadata",
    "PackageRegistry",
    "ValidationReport",
    "normalize_repo_path",
]
