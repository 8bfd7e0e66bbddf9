"""depsync 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import click

from depsync import __version__
from depsync.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level", default="INFO", envvar="DEPSYNC_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="日志级别",
)
@click.option(
    "--log-json", is_flag=True, envvar="DEPSYNC_LOG_JSON",
    help="以 JSON 行格式输出日志（适用于 CI）",
)
def main(log_level: str, log_json: bool) -> None:
    """depsync - 把依赖包的子依赖按已解析版本同步为顶层依赖"""
    setup_logging(level=log_level, json_output=log_json)


# 注册各领域子命令
from depsync.cli.cmd_sync import register as _reg_sync  # noqa: E402

_reg_sync(main)
