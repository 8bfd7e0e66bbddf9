"""owner 依赖树查询

对每个 owner 调用 `<pm> list --json --long <owner>`，把输出拍平为一层
{依赖名: 版本}。多个 owner 的查询互不依赖，用线程池并发发出，
在单个汇合点等待全部完成；任一查询失败则整体失败，不使用部分结果。

结果按 owner 名索引，调用方按清单顺序回放，与完成先后无关。
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from depsync.core.backends import PackageManager, TreeFormatError
from depsync.core.exceptions import TreeQueryError
from depsync.core.models import ResolvedTree
from depsync.utils.shell import (
    CommandExecutor,
    CommandFailure,
    LocalExecutor,
    join_args,
    run_checked,
)

logger = logging.getLogger(__name__)


class TreeResolver:
    """owner 依赖树解析器"""

    def __init__(
        self,
        backend: PackageManager,
        *,
        cwd: str = ".",
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
        max_workers: int = 8,
    ) -> None:
        self.backend = backend
        self.cwd = cwd
        self.executor = executor or LocalExecutor()
        self.timeout = timeout
        self.max_workers = max(1, max_workers)

    def resolve_tree(self, owner: str) -> ResolvedTree:
        """查询单个 owner 的直接依赖及版本"""
        cmd = self.backend.list_command(owner)
        logger.info(
            "查询依赖树: %s", join_args(cmd),
            extra={"owner": owner, "command": join_args(cmd)},
        )
        try:
            r = run_checked(
                self.executor, cmd, label=owner, cwd=self.cwd, timeout=self.timeout,
            )
        except CommandFailure as e:
            raise TreeQueryError(
                owner, e.reason, stdout=e.stdout, stderr=e.stderr,
            ) from e

        try:
            tree = self.backend.extract_tree(owner, json.loads(r.stdout))
        except (json.JSONDecodeError, TreeFormatError) as e:
            raise TreeQueryError(
                owner, f"list 命令输出不符合预期: {e}", stdout=r.stdout,
            ) from e

        logger.debug("  %s: %d 个直接依赖", owner, len(tree), extra={"owner": owner})
        return tree

    def resolve_all(self, owners: list[str]) -> dict[str, ResolvedTree]:
        """并发查询全部 owner，返回 {owner: tree}"""
        if not owners:
            return {}

        workers = min(self.max_workers, len(owners))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures: dict[str, Future[ResolvedTree]] = {
                owner: pool.submit(self.resolve_tree, owner) for owner in owners
            }
            done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()

            # 已失败的查询中按 owner 顺序取第一个
            for future in futures.values():
                if future in done:
                    exc = future.exception()
                    if exc is not None:
                        raise exc

            trees = {owner: future.result() for owner, future in futures.items()}

        logger.info("已获取 %d 个依赖树", len(trees))
        return trees
