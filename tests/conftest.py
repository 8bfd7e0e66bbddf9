"""测试共享 fixture: 假命令执行器 + 清单构造

FakeExecutor 按命令参数列表返回预置结果，记录全部调用，
测试中不会启动任何真实子进程。
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

import pytest

from depsync.core.backends import get_backend
from depsync.utils.logger import reset_logging
from depsync.utils.shell import CommandResult


class FakeExecutor:
    """实现 CommandExecutor 协议的假执行器"""

    def __init__(self) -> None:
        self.responses: dict[tuple[str, ...], CommandResult | BaseException] = {}
        self.calls: list[tuple[str, ...]] = []
        self.cwds: list[str] = []
        self._lock = threading.Lock()

    def on(self, cmd: list[str], *, stdout: Any = "", stderr: str = "",
           returncode: int = 0) -> None:
        if not isinstance(stdout, str):
            stdout = json.dumps(stdout)
        self.responses[tuple(cmd)] = CommandResult(list(cmd), returncode, stdout, stderr)

    def raise_on(self, cmd: list[str], exc: BaseException) -> None:
        self.responses[tuple(cmd)] = exc

    def on_tree(self, owner: str, deps: dict[str, str],
                manager: str = "npm") -> None:
        """按 npm / pnpm 真实输出格式预置 owner 的 list 结果"""
        backend = get_backend(manager)
        cmd = backend.list_command(owner)
        if manager == "npm":
            # npm 只给出 _dependencies，不展开子依赖
            npm_entry = {"version": "1.0.0", "_dependencies": dict(deps)}
            self.on(cmd, stdout={"name": "proj", "dependencies": {owner: npm_entry}})
        else:
            entry: dict[str, Any] = {"from": owner, "version": "1.0.0"}
            if deps:
                entry["dependencies"] = {
                    d: {"from": d, "version": v} for d, v in deps.items()
                }
            self.on(cmd, stdout=[{"name": "proj", "dependencies": {owner: entry}}])

    def execute(self, args, *, cwd=".", timeout=None) -> CommandResult:
        key = tuple(args)
        with self._lock:
            self.calls.append(key)
            self.cwds.append(cwd)
        resp = self.responses.get(key)
        if resp is None:
            return CommandResult(list(args), 0, "", "")
        if isinstance(resp, BaseException):
            raise resp
        return resp

    @property
    def list_calls(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[1] == "list"]

    @property
    def install_calls(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[1] == "install"]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def make_package(tmp_path: Path):
    """写入 package.json 并返回路径"""

    def _make(data: dict, name: str = "package.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _make


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()
