"""同步声明数据模型

数据类:
- Manifest: 校验后的清单（只读）
- OwnershipClass: owner 属于生产依赖还是开发依赖
- InstallPlan: 按 owner 类别划分的 name@version 安装列表

类型别名:
- ReverseIndex: 目标依赖 -> 声明它的 owner 列表
- ResolvedTree: owner 的直接依赖 -> 已解析版本
- MissingReport: owner -> 未能解析的目标依赖
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ReverseIndex = dict[str, list[str]]
ResolvedTree = dict[str, str]
MissingReport = dict[str, list[str]]

DEFAULT_SYNC_FIELD = "copyDependencies"


class OwnershipClass(str, Enum):
    """owner 在当前项目中的依赖类别"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


@dataclass(frozen=True)
class Manifest:
    """校验后的清单，进程内只读"""

    name: str
    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]
    # owner -> 按声明顺序去重后的目标依赖
    sync_declarations: dict[str, tuple[str, ...]]

    @property
    def owners(self) -> list[str]:
        return list(self.sync_declarations)


def format_target(name: str, version: str) -> str:
    return f"{name}@{version}"


@dataclass
class InstallPlan:
    """安装计划

    列表顺序: owner 按清单声明顺序，同一 owner 内按目标声明顺序。
    分桶依据是 owner 的类别，而非目标依赖自身的性质。
    """

    production: list[str] = field(default_factory=list)
    development: list[str] = field(default_factory=list)

    def bucket(self, ownership: OwnershipClass) -> list[str]:
        if ownership is OwnershipClass.PRODUCTION:
            return self.production
        return self.development

    @property
    def total(self) -> int:
        return len(self.production) + len(self.development)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "production": list(self.production),
            "development": list(self.development),
        }
