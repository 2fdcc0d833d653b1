"""依赖清单校验器

读取顶层依赖清单（Packages.json），保证每一项都以满足范围的版本安装，
并把新安装包声明的传递依赖合并回清单，直到不再产生新工作（不动点）。

单轮流程（按清单顺序）:
  a. 读取 HEAD 上的标签判断当前安装版本
  b. 目录存在但版本无法确定 → 视为损坏，删除后按未安装处理
  c. 未安装或版本不满足范围 → 完整安装
  d. 安装后合并新包声明的依赖:
       - 清单中没有的依赖 → 按声明的范围加入
       - 已有的依赖 → 若已安装版本低于新范围的最低版本，覆盖为新范围
  e. 清单有变化则立即保存

有新增或升级时再跑一轮；轮数有上限，超过上限视为依赖环抛 DependencyLoopError。
任何一项失败都会中止本轮：删除该项目录后原样抛出，不继续处理后续条目。

注意: 合并时只比较"已安装版本 < 新范围最低版本"，不检查新旧范围是否兼容，
后声明的依赖可以直接放宽或收紧已有约束。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from gitdeps.core.exceptions import DependencyLoopError
from gitdeps.core.pkg.manifest import DependencyManifest
from gitdeps.core.pkg.models import InstallState, PackageMetadata
from gitdeps.core.pkg.paths import require_repo_path
from gitdeps.core.pkg.versions import parse_range, range_minimum, satisfies

if TYPE_CHECKING:
    from gitdeps.core.config import Config
    from gitdeps.core.pkg.installer import Installer

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """一次 validate_all 的汇总"""

    passes: int = 0
    installed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    upgraded: list[str] = field(default_factory=list)
    removed_corrupt: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.installed or self.added or self.upgraded or self.removed_corrupt)


class DependencyValidator:
    """依赖清单校验器 - 驱动 Installer 逐项安装并收敛传递依赖"""

    def __init__(
        self,
        installer: Installer,
        manifest_path: str | Path = "",
        config: Config | None = None,
    ) -> None:
        if config is None:
            config = installer.config
        self.installer = installer
        self.config = config
        self.manifest_path = Path(
            manifest_path or installer.packages_dir / config.manifest_name
        )

    def validate_all(self) -> ValidationReport:
        """反复执行校验轮次直到清单不再变化"""
        report = ValidationReport()
        limit = self.config.max_validation_passes
        for pass_no in range(1, limit + 1):
            report.passes = pass_no
            manifest = DependencyManifest.load(self.manifest_path)
            logger.info("依赖校验第 %d 轮: %d 项", pass_no, len(manifest))
            if not self._run_pass(manifest, report):
                logger.info("依赖校验完成: %d 轮", pass_no)
                return report
        raise DependencyLoopError(
            f"依赖校验在 {limit} 轮内未收敛，可能存在循环升级的依赖声明"
        )

    def _run_pass(self, manifest: DependencyManifest, report: ValidationReport) -> bool:
        """执行一轮校验，返回是否需要再跑一轮"""
        again = False
        for key, version_range in manifest.items():
            path = require_repo_path(key)
            try:
                metadata = self._validate_entry(path, version_range, report)
                if metadata is None:
                    continue
                changed, needs_pass = self._merge_dependencies(manifest, metadata, report)
                if changed:
                    manifest.save()
                again = again or needs_pass
            except Exception:
                logger.error("依赖校验失败: %s", path)
                self.installer.uninstall(path)
                raise
        return again

    def _validate_entry(
        self, path: str, version_range: str, report: ValidationReport,
    ) -> PackageMetadata | None:
        """保证单项满足范围；发生(重新)安装时返回新元数据，否则返回 None"""
        state = self.installer.installed_state(path)
        if state.is_corrupt:
            logger.warning("无法确定 %s 的安装版本，按未安装处理", path)
            self.installer.uninstall(path)
            report.removed_corrupt.append(path)
            state = InstallState.not_installed()

        rng = parse_range(version_range)
        if state.is_installed and state.version is not None and satisfies(state.version, rng):
            logger.debug("已满足: %s@%s (%s)", path, state.version, version_range)
            return None

        metadata = self.installer.install(path, version_range)
        report.installed.append(path)
        return metadata

    def _merge_dependencies(
        self,
        manifest: DependencyManifest,
        metadata: PackageMetadata,
        report: ValidationReport,
    ) -> tuple[bool, bool]:
        """合并新安装包声明的依赖，返回 (清单是否变化, 是否需要再跑一轮)"""
        changed = False
        again = False
        for dep_repo, dep_range in metadata.dependencies.items():
            dep_path = require_repo_path(dep_repo)
            if dep_path not in manifest:
                logger.info("发现新依赖: %s -> %s@%s", metadata.repository, dep_path, dep_range)
                manifest.set(dep_path, dep_range)
                report.added.append(dep_path)
                changed = again = True
                continue

            # 总是优先满足更新的版本要求
            installed = self.installer.installed_version(dep_path)
            minimum = range_minimum(dep_range)
            if installed is not None and minimum is not None and installed < minimum:
                logger.info(
                    "依赖需要升级: %s %s -> %s (由 %s 声明)",
                    dep_path, installed, dep_range, metadata.repository,
                )
                manifest.set(dep_path, dep_range)
                report.upgraded.append(dep_path)
                changed = again = True
        return changed, again
