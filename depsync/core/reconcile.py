"""版本对账引擎

对每个 owner（清单顺序）的每个目标依赖（声明顺序），在 owner 的
已解析依赖树中查找版本:
  - 找到 -> name@version 追加到 owner 类别对应的列表
  - 未找到 -> 记入缺失报告

先收集后裁决: 全部 owner 处理完后若缺失报告非空则整体失败，
不会产出部分安装计划。纯函数，相同输入必得相同计划。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from depsync.core.exceptions import (
    OwnerHasNoDependenciesError,
    OwnerTreeMissingError,
    UnresolvedTargetsError,
)
from depsync.core.models import (
    InstallPlan,
    Manifest,
    MissingReport,
    OwnershipClass,
    ResolvedTree,
    format_target,
)

logger = logging.getLogger(__name__)


def reconcile(
    manifest: Manifest,
    ownership: Mapping[str, OwnershipClass],
    trees: Mapping[str, ResolvedTree],
) -> InstallPlan:
    """根据依赖树生成安装计划"""
    plan = InstallPlan()
    missing: MissingReport = {}

    for owner, targets in manifest.sync_declarations.items():
        tree = trees.get(owner)
        if tree is None:
            raise OwnerTreeMissingError(owner)
        if not tree:
            raise OwnerHasNoDependenciesError(owner)

        hits = plan.bucket(ownership[owner])
        misses = [t for t in targets if t not in tree]
        hits.extend(format_target(t, tree[t]) for t in targets if t in tree)
        if misses:
            missing[owner] = misses

    if missing:
        raise UnresolvedTargetsError(missing)

    logger.info(
        "安装计划: %d 个生产依赖, %d 个开发依赖",
        len(plan.production), len(plan.development),
    )
    return plan
