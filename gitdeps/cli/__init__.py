"""gitdeps 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os
from typing import Any

import click

from gitdeps import __version__
from gitdeps.services.container import get_container
from gitdeps.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path", default=None,
    help="配置文件路径（默认 gitdeps.yml，不存在则使用默认配置）",
)
def main(config_path: str | None) -> None:
    """gitdeps - 基于 Git 标签的依赖包管理"""
    setup_logging(
        level=os.getenv("GITDEPS_LOG_LEVEL", "INFO"),
        json_output=os.getenv("GITDEPS_LOG_JSON", "") == "1",
    )
    if config_path is not None:
        from gitdeps.core.config import init_config
        from gitdeps.services.container import reset_container
        init_config(config_path)
        reset_container()


# 注册各领域子命令
from gitdeps.cli.cmd_pkg import register as _reg_pkg  # noqa: E402
from gitdeps.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_pkg(main)
_reg_misc(main)
