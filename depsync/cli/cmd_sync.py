"""CLI: 依赖同步命令"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from functools import wraps
from typing import Any

import click

from depsync.core.config import DEFAULT_CONFIG_FILE, Config
from depsync.core.exceptions import DepSyncError
from depsync.services.sync_service import SyncRequest, SyncService


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(plan)
    group.add_command(check)


def _handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """业务异常 -> stderr + 退出码 1"""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DepSyncError as e:
            click.echo(str(e), err=True)
            sys.exit(1)

    return wrapper


def _package_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--package", "-p", "package", default=None,
        help="package.json 路径（默认当前目录）",
    )(func)


def _config_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE,
        help="配置文件路径",
    )(func)


def _pnpm_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option("--pnpm", is_flag=True, help="使用 pnpm（默认 npm）")(func)


def _request(package: str | None, pnpm: bool = False, dry_run: bool = False) -> SyncRequest:
    return SyncRequest(
        manifest_path=package, manager="pnpm" if pnpm else None, dry_run=dry_run,
    )


@click.command()
@_package_option
@_pnpm_option
@_config_option
@click.option("--dry-run", is_flag=True, help="只输出安装命令，不执行")
@_handle_errors
def install(package: str | None, pnpm: bool, config_path: str, dry_run: bool) -> None:
    """按已解析版本安装同步声明中的全部依赖"""
    cfg = Config.from_file(config_path)
    result = SyncService(cfg).run(_request(package, pnpm, dry_run))
    if result.install_cmd:
        click.echo(result.install_cmd)
    if dry_run:
        click.echo("dry-run: 未执行安装")
    elif result.installed:
        click.echo(f"{cfg.sync_field} 已全部安装")
    else:
        click.echo("没有需要安装的依赖。")


@click.command()
@_package_option
@_pnpm_option
@_config_option
@click.option("--json", "as_json", is_flag=True, help="以 JSON 输出安装计划")
@_handle_errors
def plan(package: str | None, pnpm: bool, config_path: str, as_json: bool) -> None:
    """查询依赖树并输出安装计划（不安装）"""
    cfg = Config.from_file(config_path)
    result = SyncService(cfg).plan(_request(package, pnpm))
    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return
    for label, targets in (
        ("dependencies", result.plan.production),
        ("devDependencies", result.plan.development),
    ):
        click.echo(f"{label}:")
        for t in targets:
            click.echo(f"  {t}")
    if result.install_cmd:
        click.echo(result.install_cmd)


@click.command()
@_package_option
@_config_option
@_handle_errors
def check(package: str | None, config_path: str) -> None:
    """只校验同步声明（不调用包管理器）"""
    cfg = Config.from_file(config_path)
    ctx = SyncService(cfg).validate(_request(package))
    for owner, targets in ctx.manifest.sync_declarations.items():
        click.echo(f"  {owner:20s} [{ctx.ownership[owner].value:11s}] {', '.join(targets)}")
    click.echo("同步声明校验通过")
