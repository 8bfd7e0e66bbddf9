"""安装命令生成与执行

生产依赖与开发依赖各生成一条 install 命令，空列表跳过。
两条命令按 `&&` 语义依次执行: 前一条失败则不再执行后一条。
只执行一次，不重试。
"""

from __future__ import annotations

import logging

from depsync.core.backends import PackageManager
from depsync.core.exceptions import InstallExecutionError
from depsync.core.models import InstallPlan
from depsync.utils.shell import (
    CommandExecutor,
    CommandFailure,
    LocalExecutor,
    join_args,
    run_checked,
)

logger = logging.getLogger(__name__)

COMMAND_SEPARATOR = " && "


def _labelled_commands(
    plan: InstallPlan, backend: PackageManager,
) -> list[tuple[str, list[str]]]:
    """(桶名, 参数列表)，桶名用于日志和错误定位"""
    cmds: list[tuple[str, list[str]]] = []
    if plan.production:
        cmds.append(("dependencies", backend.install_command(plan.production)))
    if plan.development:
        cmds.append(
            ("devDependencies", backend.install_command(plan.development, dev=True)),
        )
    return cmds


def build_install_commands(
    plan: InstallPlan, backend: PackageManager,
) -> list[list[str]]:
    """生成 0~2 条安装命令（参数列表形式）"""
    return [cmd for _, cmd in _labelled_commands(plan, backend)]


def join_commands(cmds: list[list[str]]) -> str:
    return COMMAND_SEPARATOR.join(join_args(c) for c in cmds)


class InstallEmitter:
    """执行安装计划"""

    def __init__(
        self,
        backend: PackageManager,
        *,
        cwd: str = ".",
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
    ) -> None:
        self.backend = backend
        self.cwd = cwd
        self.executor = executor or LocalExecutor()
        self.timeout = timeout

    def emit(self, plan: InstallPlan, *, dry_run: bool = False) -> str:
        """执行安装，返回完整命令字符串

        dry_run 时只生成命令不执行。
        """
        labelled = _labelled_commands(plan, self.backend)
        install_cmd = join_commands([cmd for _, cmd in labelled])
        if not labelled:
            logger.info("安装计划为空，跳过安装")
            return install_cmd
        if dry_run:
            logger.info("dry-run，不执行: %s", install_cmd, extra={"command": install_cmd})
            return install_cmd

        for label, cmd in labelled:
            logger.info(
                "安装 %s: %s (cwd=%s)", label, join_args(cmd), self.cwd,
                extra={"command": join_args(cmd)},
            )
            try:
                run_checked(
                    self.executor, cmd, label=label, cwd=self.cwd, timeout=self.timeout,
                )
            except CommandFailure as e:
                raise InstallExecutionError(
                    install_cmd, f"{label}: {join_args(cmd)} {e.reason}", stderr=e.stderr,
                ) from e
        logger.info("安装完成: %d 个依赖", plan.total)
        return install_cmd
