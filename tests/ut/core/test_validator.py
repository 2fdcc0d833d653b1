"""依赖清单校验（不动点循环）测试"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest
import semantic_version as semver
from conftest import GIT_HOST, FakeGit, read_manifest, write_manifest

from gitdeps.core.config import Config
from gitdeps.core.exceptions import (
    DependencyLoopError,
    InvalidRepositoryPathError,
    NoSatisfyingVersionError,
)
from gitdeps.services.container import ServiceContainer


class TestValidateAll:
    def test_transitive_dependency_added_and_installed(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/a", "1.0.0", dependencies={"owner/b": "^2.0.0"})
        fake_git.add_package("owner/b", "2.0.0")
        fake_git.add_package("owner/b", "2.1.0")
        write_manifest(packages_dir, {"owner/a": "^1.0.0"})

        report = container.validator.validate_all()

        assert report.passes == 2
        assert report.installed == ["owner/a", "owner/b"]
        assert report.added == ["owner/b"]
        assert read_manifest(packages_dir) == {"owner/a": "^1.0.0", "owner/b": "^2.0.0"}
        assert container.installer.installed_version("owner/a") == semver.Version("1.0.0")
        assert container.installer.installed_version("owner/b") == semver.Version("2.1.0")

    def test_second_run_is_stable(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/a", "1.0.0", dependencies={"owner/b": "^2.0.0"})
        fake_git.add_package("owner/b", "2.0.0")
        write_manifest(packages_dir, {"owner/a": "^1.0.0"})
        container.validator.validate_all()
        clones = fake_git.count("clone")

        report = container.validator.validate_all()
        assert report.passes == 1
        assert not report.changed
        assert fake_git.count("clone") == clones

    def test_dependency_url_is_normalized(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package(
            "owner/a", "1.0.0", dependencies={"https://github.com/owner/b.git": "*"},
        )
        fake_git.add_package("owner/b", "1.0.0")
        write_manifest(packages_dir, {"owner/a": "*"})

        container.validator.validate_all()
        assert list(read_manifest(packages_dir)) == ["owner/a", "owner/b"]

    def test_upgrade_when_installed_below_new_minimum(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/b", "1.0.0")
        fake_git.add_package("owner/b", "2.0.0")
        fake_git.add_package("owner/a", "1.0.0", dependencies={"owner/b": "^2.0.0"})
        write_manifest(packages_dir, {"owner/b": "^1.0.0", "owner/a": "*"})

        report = container.validator.validate_all()

        assert report.upgraded == ["owner/b"]
        assert read_manifest(packages_dir)["owner/b"] == "^2.0.0"
        assert container.installer.installed_version("owner/b") == semver.Version("2.0.0")

    def test_existing_range_kept_when_installed_is_newer(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/b", "1.0.0")
        fake_git.add_package("owner/b", "2.0.0")
        fake_git.add_package("owner/a", "1.0.0", dependencies={"owner/b": "^1.0.0"})
        write_manifest(packages_dir, {"owner/b": "^2.0.0", "owner/a": "*"})

        report = container.validator.validate_all()

        # 只比较最低版本，不检查两个范围是否兼容
        assert report.upgraded == []
        assert read_manifest(packages_dir)["owner/b"] == "^2.0.0"
        assert container.installer.installed_version("owner/b") == semver.Version("2.0.0")

    def test_corrupt_entry_is_reinstalled(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/a", "1.0.0")
        (packages_dir / "owner.a").mkdir(parents=True)
        write_manifest(packages_dir, {"owner/a": "*"})

        report = container.validator.validate_all()
        assert report.removed_corrupt == ["owner/a"]
        assert report.installed == ["owner/a"]
        assert container.installer.installed_state("owner/a").is_installed

    def test_missing_manifest(self, container: ServiceContainer, packages_dir: Path) -> None:
        report = container.validator.validate_all()
        assert report.passes == 1
        assert not report.changed
        assert not (packages_dir / "Packages.json").exists()

    def test_manifest_key_case_preserved(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        """清单写 Owner/B、依赖声明写 owner/b: 按同一个包升级，保留清单原键"""
        fake_git.add_package("Owner/B", "1.0.0")
        fake_git.add_package("Owner/B", "2.0.0")
        fake_git.add_package("owner/a", "1.0.0", dependencies={"owner/b": "^2.0.0"})
        write_manifest(packages_dir, {"Owner/B": "^1.0.0", "owner/a": "*"})

        report = container.validator.validate_all()

        assert report.upgraded == ["owner/b"]
        assert read_manifest(packages_dir) == {"Owner/B": "^2.0.0", "owner/a": "*"}
        assert container.installer.installed_version("owner/b") == semver.Version("2.0.0")
        assert sorted(p.name for p in packages_dir.iterdir() if p.is_dir()) == ["owner.a", "owner.b"]


class TestFailures:
    def test_fail_fast_stops_pass(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/a", "1.0.0")
        fake_git.add_package("owner/bad", "1.0.0")
        fake_git.add_package("owner/c", "1.0.0")
        write_manifest(packages_dir, {"owner/a": "*", "owner/bad": "^9.0.0", "owner/c": "*"})

        with pytest.raises(NoSatisfyingVersionError):
            container.validator.validate_all()

        assert container.installer.installed_state("owner/a").is_installed
        assert ("ls-remote", f"{GIT_HOST}/owner/c.git") not in fake_git.calls
        assert not (packages_dir / "owner.c").exists()

    def test_failed_entry_is_uninstalled(
        self, container: ServiceContainer, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/bad", "1.0.0")
        container.installer.install("owner/bad", "*")
        write_manifest(packages_dir, {"owner/bad": "^9.0.0"})

        with pytest.raises(NoSatisfyingVersionError):
            container.validator.validate_all()
        assert not (packages_dir / "owner.bad").exists()
        assert "owner/bad" not in container.registry

    def test_invalid_manifest_key(
        self, container: ServiceContainer, packages_dir: Path,
    ) -> None:
        write_manifest(packages_dir, {"not-a-repo": "*"})
        with pytest.raises(InvalidRepositoryPathError):
            container.validator.validate_all()

    def test_pass_limit(
        self, config: Config, fake_git: FakeGit, packages_dir: Path,
    ) -> None:
        fake_git.add_package("owner/a", "1.0.0", dependencies={"owner/b": "*"})
        fake_git.add_package("owner/b", "1.0.0")
        write_manifest(packages_dir, {"owner/a": "*"})
        container = ServiceContainer(config=replace(config, max_validation_passes=1), git=fake_git)

        with pytest.raises(DependencyLoopError):
            container.validator.validate_all()
        # 已发现的依赖在抛错前已写回清单
        assert "owner/b" in read_manifest(packages_dir)
