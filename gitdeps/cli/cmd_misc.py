"""CLI — 配置与服务命令"""

from __future__ import annotations

from pathlib import Path

import click

from gitdeps.cli import _svc
from gitdeps.utils.yaml_io import save_yaml


def register(group: click.Group) -> None:
    group.add_command(show_config)
    group.add_command(init_config_file)
    group.add_command(serve)


@click.command(name="config")
def show_config() -> None:
    """显示当前生效的配置"""
    for key, value in _svc().config.to_dict().items():
        if key == "extra" and not value:
            continue
        click.echo(f"  {key}: {value}")


@click.command(name="init-config")
@click.argument("path", default="gitdeps.yml")
@click.option("--force", is_flag=True, help="覆盖已存在的文件")
def init_config_file(path: str, force: bool) -> None:
    """把当前配置写出为 YAML 文件，便于修改"""
    target = Path(path)
    if target.exists() and not force:
        raise click.ClickException(f"文件已存在: {target}（使用 --force 覆盖）")
    data = _svc().config.to_dict()
    if not data.get("extra"):
        data.pop("extra", None)
    save_yaml(target, data)
    click.echo(f"已写入: {target}")


@click.command()
@click.option("--host", default="127.0.0.1", help="监听地址")
@click.option("--port", default=8888, help="监听端口")
def serve(host: str, port: int) -> None:
    """启动依赖包管理 Web API"""
    from gitdeps.web.app import run_server
    run_server(host=host, port=port)
