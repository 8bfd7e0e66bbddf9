"""同步服务: CLI 共享的编排逻辑

流程:
  1. 加载并校验清单（字段、owner、重复认领），不启动任何子进程
  2. 并发查询每个 owner 的依赖树
  3. 对账生成安装计划
  4. 执行安装命令

validate / plan / run 分别停在第 1 / 3 / 4 步。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from depsync.core.backends import PackageManager, get_backend
from depsync.core.config import Config
from depsync.core.conflict import check_conflicts
from depsync.core.installer import InstallEmitter, build_install_commands, join_commands
from depsync.core.manifest import load_manifest, validate_manifest
from depsync.core.models import InstallPlan, Manifest, OwnershipClass
from depsync.core.ownership import classify_owners
from depsync.core.reconcile import reconcile
from depsync.core.tree import TreeResolver
from depsync.utils.shell import CommandExecutor, join_args

logger = logging.getLogger(__name__)


@dataclass
class SyncRequest:
    """同步请求 DTO（未指定的字段沿用 Config）"""

    manifest_path: str | None = None
    manager: str | None = None
    dry_run: bool = False


@dataclass
class SyncContext:
    """结构校验通过后的上下文"""

    manifest: Manifest
    ownership: dict[str, OwnershipClass]
    backend: PackageManager
    cwd: str


@dataclass
class SyncResult:
    """同步结果"""

    manifest_name: str
    plan: InstallPlan
    commands: list[str] = field(default_factory=list)
    install_cmd: str = ""
    installed: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.manifest_name,
            "plan": self.plan.to_dict(),
            "commands": list(self.commands),
            "install_cmd": self.install_cmd,
            "installed": self.installed,
        }


class SyncService:
    """依赖同步服务"""

    def __init__(
        self,
        config: Config | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.config = config or Config()
        self._executor = executor

    def _effective(self, req: SyncRequest) -> Config:
        return self.config.override(
            manifest_path=req.manifest_path, manager=req.manager,
        )

    def validate(self, req: SyncRequest) -> SyncContext:
        """纯内存校验，失败时不会启动任何子进程"""
        cfg = self._effective(req)
        backend = get_backend(cfg.manager)
        raw = load_manifest(cfg.manifest_path)
        manifest = validate_manifest(raw, field=cfg.sync_field)
        check_conflicts(manifest)
        ownership = classify_owners(manifest)
        logger.info(
            "同步声明校验通过: %d 个 owner, %d 个目标依赖",
            len(manifest.sync_declarations),
            sum(len(t) for t in manifest.sync_declarations.values()),
        )
        return SyncContext(
            manifest=manifest, ownership=ownership,
            backend=backend, cwd=str(cfg.project_dir),
        )

    def plan(self, req: SyncRequest) -> SyncResult:
        """校验 + 查询依赖树 + 对账，不安装"""
        cfg = self._effective(req)
        ctx = self.validate(req)
        resolver = TreeResolver(
            ctx.backend, cwd=ctx.cwd, executor=self._executor,
            timeout=cfg.query_timeout, max_workers=cfg.max_workers,
        )
        trees = resolver.resolve_all(ctx.manifest.owners)
        plan = reconcile(ctx.manifest, ctx.ownership, trees)
        cmds = build_install_commands(plan, ctx.backend)
        return SyncResult(
            manifest_name=ctx.manifest.name,
            plan=plan,
            commands=[join_args(c) for c in cmds],
            install_cmd=join_commands(cmds),
        )

    def run(self, req: SyncRequest) -> SyncResult:
        """完整同步流程"""
        cfg = self._effective(req)
        result = self.plan(req)
        emitter = InstallEmitter(
            get_backend(cfg.manager), cwd=str(cfg.project_dir),
            executor=self._executor, timeout=cfg.install_timeout,
        )
        result.install_cmd = emitter.emit(result.plan, dry_run=req.dry_run)
        result.installed = not req.dry_run and not result.plan.is_empty
        return result
