"""owner 类别划分"""

from __future__ import annotations

from depsync.core.models import Manifest, OwnershipClass


def classify_owners(manifest: Manifest) -> dict[str, OwnershipClass]:
    """按清单顺序给每个 owner 分类

    同时出现在 dependencies 和 devDependencies 中的 owner 视为生产依赖。
    输入已经过 validate_manifest 校验，不会失败。
    """
    return {
        owner: (
            OwnershipClass.PRODUCTION
            if owner in manifest.dependencies
            else OwnershipClass.DEVELOPMENT
        )
        for owner in manifest.sync_declarations
    }
