"""包管理器后端

每个后端描述三件事:
- list 命令: 查询某个 owner 已安装的直接依赖
- install 命令: 安装 name@version 列表（开发依赖追加 -D）
- 输出归一化: 把 list --json --long 的原始输出拍平为 {依赖名: 版本}

npm 输出（owner 条目只带 _dependencies，不展开子依赖）:
    {"dependencies": {"<owner>": {"version": ..., "_dependencies": {"<dep>": "..."}}}}
pnpm 输出（项目数组；默认 depth 0 不含子依赖，需要 --depth 1）:
    [{"dependencies": {"<owner>": {"version": ...,
                                    "dependencies": {"<dep>": {"version": ...}}}},
      "devDependencies": {...}}]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from depsync.core.exceptions import ConfigError
from depsync.core.models import ResolvedTree

DEV_FLAG = "-D"


class TreeFormatError(ValueError):
    """list 输出结构不符合预期（由调用方包装为 TreeQueryError）"""


def _as_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TreeFormatError(f"{what} 不是 JSON 对象")
    return value


def _child_version(child: Any) -> str | None:
    if isinstance(child, dict):
        version = child.get("version")
        return str(version) if version else None
    if isinstance(child, str) and child:
        return child
    return None


@dataclass(frozen=True)
class PackageManager:
    """包管理器后端描述"""

    name: str
    # list 命令在 owner 名之前追加的参数
    list_args: tuple[str, ...] = ()
    # owner 直接依赖所在字段；npm 放在内部字段 _dependencies
    deps_field: str = "dependencies"
    # 依赖字段缺失时是否视为叶子包（空依赖树），否则视为输出格式错误
    missing_deps_is_leaf: bool = False
    # 顶层是否为项目数组
    project_list: bool = False
    # owner 查找的顶层段
    sections: tuple[str, ...] = ("dependencies",)

    def list_command(self, owner: str) -> list[str]:
        return [self.name, "list", "--json", "--long", *self.list_args, owner]

    def install_command(self, targets: list[str], dev: bool = False) -> list[str]:
        cmd = [self.name, "install", *targets]
        if dev:
            cmd.append(DEV_FLAG)
        return cmd

    def _owner_entry(self, owner: str, payload: Any) -> dict[str, Any]:
        if self.project_list:
            if not isinstance(payload, list) or not payload:
                raise TreeFormatError("输出不是非空的项目数组")
            payload = payload[0]
        root = _as_dict(payload, "输出")
        for section in self.sections:
            deps = root.get(section)
            if isinstance(deps, dict) and owner in deps:
                return _as_dict(deps[owner], f"'{owner}' 条目")
        raise TreeFormatError(f"输出中缺少 '{owner}' 条目")

    def extract_tree(self, owner: str, payload: Any) -> ResolvedTree:
        """拍平 owner 的直接依赖为 {依赖名: 版本}"""
        entry = self._owner_entry(owner, payload)
        if self.deps_field not in entry:
            if self.missing_deps_is_leaf:
                return {}
            raise TreeFormatError(f"'{owner}' 条目缺少 {self.deps_field} 字段")

        deps = _as_dict(entry[self.deps_field], f"'{owner}'.{self.deps_field}")
        tree: ResolvedTree = {}
        for dep, child in deps.items():
            version = _child_version(child)
            if version is None:
                raise TreeFormatError(f"'{owner}' 的依赖 '{dep}' 缺少版本")
            tree[dep] = version
        return tree


NPM = PackageManager(name="npm", deps_field="_dependencies")
PNPM = PackageManager(
    name="pnpm",
    list_args=("--depth", "1"),
    missing_deps_is_leaf=True,
    project_list=True,
    sections=("dependencies", "devDependencies"),
)

BACKENDS: dict[str, PackageManager] = {NPM.name: NPM, PNPM.name: PNPM}
DEFAULT_BACKEND = NPM.name


def get_backend(name: str) -> PackageManager:
    backend = BACKENDS.get(name) if isinstance(name, str) else None
    if backend is None:
        raise ConfigError(
            f"不支持的包管理器: '{name}'。可用: {list(BACKENDS)}"
        )
    return backend
