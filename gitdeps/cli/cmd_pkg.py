"""CLI — 依赖包管理命令"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

import click

from gitdeps.cli import _svc
from gitdeps.core.exceptions import GitDepsError


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(uninstall)
    group.add_command(validate)
    group.add_command(list_packages)
    group.add_command(versions)
    group.add_command(status)
    group.add_command(info)


def _friendly_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """业务异常转换为 ClickException，输出 [错误码] 消息"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except GitDepsError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e

    return wrapper


@click.command()
@click.argument("repo")
@click.argument("version_range", default="*")
@_friendly_errors
def install(repo: str, version_range: str) -> None:
    """安装依赖包（REPO 支持 owner/name、SSH 或 HTTPS 地址）"""
    meta = _svc().installer.install(repo, version_range)
    version = _svc().installer.installed_version(meta.repository)
    click.echo(f"就绪: {meta.repository}@{version}  {meta.name}")


@click.command()
@click.argument("repo")
@_friendly_errors
def uninstall(repo: str) -> None:
    """卸载依赖包（未安装时不报错）"""
    _svc().installer.uninstall(repo)
    click.echo(f"已卸载: {repo}")


@click.command()
@_friendly_errors
def validate() -> None:
    """按 Packages.json 校验并安装全部依赖（含传递依赖）"""
    report = _svc().validator.validate_all()
    click.echo(f"校验完成: {report.passes} 轮")
    for label, items in (
        ("安装", report.installed),
        ("新增依赖", report.added),
        ("升级依赖", report.upgraded),
        ("清理损坏", report.removed_corrupt),
    ):
        if items:
            click.echo(f"  {label}: {', '.join(items)}")
    if not report.changed:
        click.echo("  所有依赖均已满足。")


@click.command(name="list")
def list_packages() -> None:
    """列出已安装的依赖包"""
    packages = _svc().registry.all()
    if not packages:
        click.echo("没有已安装的依赖包。")
        return
    for p in sorted(packages, key=lambda m: m.repository.casefold()):
        click.echo(f"  {p.repository:30s} {p.name:20s} {p.description}")


@click.command()
@click.argument("repo")
@click.option("--range", "version_range", default=None, help="只显示满足该范围的版本")
@_friendly_errors
def versions(repo: str, version_range: str | None) -> None:
    """列出远程可用的版本（按版本升序）"""
    from gitdeps.core.pkg.versions import parse_range

    installer = _svc().installer
    available = installer.available_versions(repo)
    if version_range:
        rng = parse_range(version_range)
        available = [v for v in available if rng.match(v)]
    if not available:
        click.echo(f"没有可用版本: {repo}")
        return
    current = installer.installed_version(repo)
    for v in available:
        marker = " <- 当前" if v == current else ""
        click.echo(f"  {v}{marker}")


@click.command()
@click.argument("repo")
@_friendly_errors
def status(repo: str) -> None:
    """显示依赖包的本地安装状态"""
    state = _svc().installer.installed_state(repo)
    if state.is_installed:
        click.echo(f"已安装: {state.version}")
    elif state.is_corrupt:
        click.echo("损坏: 目录存在但无法确定版本")
    else:
        click.echo("未安装")


@click.command()
@click.argument("repo")
@click.option("--ref", default="master", help="读取 package.json 的分支")
@_friendly_errors
def info(repo: str, ref: str) -> None:
    """不安装，直接查看远程 package.json"""
    from gitdeps.core.pkg.remote import fetch_remote_metadata

    meta = fetch_remote_metadata(repo, ref=ref, config=_svc().config)
    click.echo(f"名称: {meta.name}")
    click.echo(f"描述: {meta.description}")
    click.echo(f"作者: {meta.author}")
    click.echo(f"许可: {meta.license}")
    click.echo(f"主页: {meta.homepage}")
    if meta.dependencies:
        click.echo("依赖:")
        for dep, rng in meta.dependencies.items():
            click.echo(f"  {dep}: {rng}")
