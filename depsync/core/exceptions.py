"""统一异常体系

所有业务异常继承 DepSyncError，每个子类带一个稳定的 code。
CLI 层捕获 DepSyncError 后把消息写到 stderr 并以非零状态退出。

分类:
- 声明错误: 字段缺失/为空/格式错误、未知 owner、重复认领（纯内存检查，先于任何子进程）
- 查询错误: 包管理器 list 命令失败或输出无法解析
- 对账错误: owner 无依赖、目标未解析
- 执行错误: install 命令失败
"""

from __future__ import annotations

import pprint


def _fmt(data: object) -> str:
    """结构化数据的可读输出（保持插入顺序）"""
    return pprint.pformat(data, sort_dicts=False)


class DepSyncError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(DepSyncError):
    """配置文件或命令行参数无效"""

    code = "CONFIG_ERROR"


# =========================================================================
# 声明错误
# =========================================================================

class ManifestLoadError(DepSyncError):
    """清单文件无法读取或解析"""

    code = "MANIFEST_LOAD_FAILED"

    def __init__(self, path: str, cwd: str, reason: str = "") -> None:
        self.path = path
        self.cwd = cwd
        message = f"清单文件加载失败\npackagePath: {path}\ncwd: {cwd}"
        if reason:
            message += f"\nreason: {reason}"
        super().__init__(message)


class DeclarationMissingError(DepSyncError):
    code = "DECLARATION_MISSING"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"必填字段 package.{field} 缺失")


class DeclarationEmptyError(DepSyncError):
    code = "DECLARATION_EMPTY"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"必填字段 package.{field} 为空")


class DeclarationFormatError(DepSyncError):
    """同步声明的结构不符合 {owner: [target, ...]}"""

    code = "DECLARATION_INVALID"

    def __init__(self, field: str, owner: str | None, detail: str) -> None:
        self.field = field
        self.owner = owner
        where = f"package.{field}" if owner is None else f"package.{field}['{owner}']"
        super().__init__(f"{where} 格式无效: {detail}")


class UnknownOwnerError(DepSyncError):
    code = "UNKNOWN_OWNER"

    def __init__(self, owner: str) -> None:
        self.owner = owner
        super().__init__(
            f"包 '{owner}' 不在 dependencies 或 devDependencies 中"
        )


class DuplicateOwnershipError(DepSyncError):
    """两个及以上 owner 声明同步同一个目标依赖"""

    code = "DUPLICATE_OWNERSHIP"

    def __init__(self, duplicates: dict[str, list[str]]) -> None:
        self.duplicates = duplicates
        super().__init__(
            "存在两个或以上的包试图同步相同的依赖:\n" + _fmt(duplicates)
        )


# =========================================================================
# 查询错误
# =========================================================================

class TreeQueryError(DepSyncError):
    """包管理器依赖树查询失败或输出格式不符合预期"""

    code = "TREE_QUERY_FAILED"

    def __init__(
        self, owner: str, reason: str, *, stdout: str = "", stderr: str = "",
    ) -> None:
        self.owner = owner
        self.stdout = stdout
        self.stderr = stderr
        message = f"查询包 '{owner}' 的依赖树失败: {reason}"
        if stdout:
            message += f"\nstdout: {stdout}"
        if stderr:
            message += f"\nstderr: {stderr}"
        super().__init__(message)


# =========================================================================
# 对账错误
# =========================================================================

class OwnerTreeMissingError(DepSyncError):
    code = "OWNER_TREE_MISSING"

    def __init__(self, owner: str) -> None:
        self.owner = owner
        super().__init__(
            f"查询结果中缺少 '{owner}' 的依赖树，同步声明与查询结果不一致"
        )


class OwnerHasNoDependenciesError(DepSyncError):
    code = "OWNER_HAS_NO_DEPENDENCIES"

    def __init__(self, owner: str) -> None:
        self.owner = owner
        super().__init__(f"包 '{owner}' 没有任何依赖")


class UnresolvedTargetsError(DepSyncError):
    """目标依赖不在 owner 的已解析依赖树中"""

    code = "UNRESOLVED_TARGETS"

    def __init__(self, missing: dict[str, list[str]]) -> None:
        self.missing = missing
        super().__init__(
            "以下依赖在对应包的依赖树中不存在:\nmissing: " + _fmt(missing)
        )


# =========================================================================
# 执行错误
# =========================================================================

class InstallExecutionError(DepSyncError):
    code = "INSTALL_FAILED"

    def __init__(self, command: str, reason: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        message = f"安装依赖失败\ncmd: {command}"
        if reason:
            message += f"\nreason: {reason}"
        if stderr:
            message += f"\nstderr: {stderr}"
        super().__init__(message)
