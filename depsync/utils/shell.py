"""包管理器子进程调用

CommandExecutor 协议负责真正启动进程，测试中注入假的实现。
run_checked() 在其上统一处理超时、启动失败和非零退出码，
把三种失败都归一为带 label（owner 名或 install 桶）的 CommandFailure，
由 tree / installer 再包装为各自的业务异常。
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

# 写入异常消息的 stderr 最大长度
STDERR_LIMIT = 2000


def join_args(args: list[str]) -> str:
    """参数列表 -> 可直接粘贴到终端的命令字符串"""
    return shlex.join(args)


@dataclass
class CommandResult:
    """一次包管理器调用的结果"""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return join_args(self.args)

    @property
    def stderr_excerpt(self) -> str:
        return self.stderr[:STDERR_LIMIT]


class CommandExecutor(Protocol):
    """启动包管理器进程的协议

    超时应抛出 subprocess.TimeoutExpired，启动失败应抛出 OSError。
    """

    def execute(
        self, args: list[str], *, cwd: str = ".", timeout: int | None = None,
    ) -> CommandResult:
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现，不经过 shell）

    npm/pnpm 的输出可能夹带非 UTF-8 字节（包描述、本地路径），
    解码时替换非法字节，避免 UnicodeDecodeError 逃出业务异常体系。
    """

    def execute(
        self, args: list[str], *, cwd: str = ".", timeout: int | None = None,
    ) -> CommandResult:
        r = subprocess.run(
            args, capture_output=True, cwd=cwd, check=False, timeout=timeout,
            encoding="utf-8", errors="replace",
        )
        return CommandResult(
            args=list(args), returncode=r.returncode,
            stdout=r.stdout or "", stderr=r.stderr or "",
        )


class CommandFailure(Exception):
    """包管理器调用失败（超时 / 无法启动 / 非零退出码）"""

    def __init__(
        self, label: str, args: list[str], reason: str,
        result: CommandResult | None = None,
    ) -> None:
        self.label = label
        self.args_list = args
        self.reason = reason
        self.result = result
        super().__init__(f"{label}: {join_args(args)} {reason}")

    @property
    def stdout(self) -> str:
        return self.result.stdout if self.result else ""

    @property
    def stderr(self) -> str:
        return self.result.stderr_excerpt if self.result else ""


def run_checked(
    executor: CommandExecutor,
    args: list[str],
    *,
    label: str,
    cwd: str = ".",
    timeout: int | None = None,
) -> CommandResult:
    """执行命令，任何失败都抛出 CommandFailure"""
    logger.debug(
        "执行 [%s]: %s (cwd=%s)", label, join_args(args), cwd,
        extra={"label": label, "command": join_args(args)},
    )
    try:
        r = executor.execute(args, cwd=cwd, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise CommandFailure(label, args, f"超时（{timeout}秒）") from e
    except OSError as e:
        raise CommandFailure(label, args, f"无法启动 {args[0]}: {e}") from e
    if not r.success:
        raise CommandFailure(label, args, f"退出码 {r.returncode}", r)
    return r
