"""领域协议定义

集中定义引擎各层之间的接口契约（Protocol），
使用 typing.Protocol 而非 ABC，测试替身无需继承即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


# =========================================================================
# 版本控制协议
# =========================================================================

class VersionControl(Protocol):
    """版本控制协作者协议

    Installer 与 DependencyValidator 的全部 git 副作用都经由此接口。
    除 describe_tag 外，失败一律抛 ExternalProcessError。
    """

    def clone(self, url: str, dest: Path) -> None:
        """克隆远程仓库到目标目录"""
        ...

    def fetch_tags(self, repo_dir: Path) -> None:
        """拉取远程全部标签"""
        ...

    def checkout_tag(self, repo_dir: Path, tag: str) -> None:
        """强制检出指定标签，丢弃工作区修改"""
        ...

    def list_remote_tags(self, url: str) -> list[str]:
        """列出远程仓库的标签名（已去掉 ^{} 后缀，去重）"""
        ...

    def describe_tag(self, repo_dir: Path) -> str | None:
        """精确指向 HEAD 的标签名（多个时取语义版本最大者），没有时返回 None"""
        ...
