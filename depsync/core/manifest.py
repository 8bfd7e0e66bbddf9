"""清单加载与同步声明校验

load_manifest() 只负责把 package.json 读成 dict；
validate_manifest() 是纯校验，不产生任何副作用，失败时抛出对应的声明错误。
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from depsync.core.exceptions import (
    DeclarationEmptyError,
    DeclarationFormatError,
    DeclarationMissingError,
    ManifestLoadError,
    UnknownOwnerError,
)
from depsync.core.models import DEFAULT_SYNC_FIELD, Manifest
from depsync.utils.file_io import load_json

logger = logging.getLogger(__name__)


def load_manifest(path: str | Path) -> dict[str, Any]:
    """读取清单文件，返回原始 JSON 对象"""
    p = Path(path)
    try:
        data = load_json(p)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError 是 ValueError 的子类
        raise ManifestLoadError(str(p), os.getcwd(), str(e)) from e
    if not isinstance(data, dict):
        raise ManifestLoadError(
            str(p), os.getcwd(), f"顶层不是 JSON 对象 ({type(data).__name__})",
        )
    logger.info("已加载清单: %s", p)
    return data


def _dep_map(raw: dict[str, Any], key: str) -> dict[str, str]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}


def _targets(field: str, owner: str, value: Any) -> tuple[str, ...]:
    """校验单个 owner 的目标列表，按首次出现去重"""
    if not isinstance(value, list):
        raise DeclarationFormatError(
            field, owner, f"应为依赖名列表，实际为 {type(value).__name__}",
        )
    seen: dict[str, None] = {}
    for target in value:
        if not isinstance(target, str) or not target:
            raise DeclarationFormatError(field, owner, f"依赖名无效: {target!r}")
        if target in seen:
            logger.warning("'%s' 重复声明了依赖 '%s'，已忽略重复项", owner, target)
            continue
        seen[target] = None
    return tuple(seen)


def validate_manifest(
    raw: dict[str, Any], field: str = DEFAULT_SYNC_FIELD,
) -> Manifest:
    """校验原始清单并构造 Manifest

    校验顺序: 字段缺失 -> 字段为空 -> 结构 -> owner 是否已声明。
    """
    declarations = raw.get(field)
    if declarations is None:
        raise DeclarationMissingError(field)
    if not isinstance(declarations, dict):
        raise DeclarationFormatError(
            field, None, f"应为对象，实际为 {type(declarations).__name__}",
        )
    if len(declarations) == 0:
        raise DeclarationEmptyError(field)

    dependencies = _dep_map(raw, "dependencies")
    dev_dependencies = _dep_map(raw, "devDependencies")

    sync: dict[str, tuple[str, ...]] = {}
    for owner, value in declarations.items():
        if owner not in dependencies and owner not in dev_dependencies:
            raise UnknownOwnerError(owner)
        sync[owner] = _targets(field, owner, value)

    return Manifest(
        name=str(raw.get("name", "")),
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
        sync_declarations=sync,
    )
