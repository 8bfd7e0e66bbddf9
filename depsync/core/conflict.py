"""重复认领检测

构建「目标依赖 -> owner 列表」反向索引，任何目标被两个及以上 owner
声明时一次性报告全部冲突，便于用户一次修改到位。
纯函数，必须在任何子进程启动前执行。
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from depsync.core.exceptions import DuplicateOwnershipError
from depsync.core.models import Manifest, ReverseIndex


def build_reverse_index(declarations: Mapping[str, Sequence[str]]) -> ReverseIndex:
    index: ReverseIndex = {}
    for owner, targets in declarations.items():
        for target in targets:
            index.setdefault(target, []).append(owner)
    return index


def find_conflicts(index: ReverseIndex) -> dict[str, list[str]]:
    """返回被多个 owner 认领的目标及其全部 owner"""
    return {target: owners for target, owners in index.items() if len(owners) > 1}


def check_conflicts(manifest: Manifest) -> ReverseIndex:
    """构建反向索引并校验每个目标只有一个 owner"""
    index = build_reverse_index(manifest.sync_declarations)
    duplicates = find_conflicts(index)
    if duplicates:
        raise DuplicateOwnershipError(duplicates)
    return index
