"""子进程执行工具 — 统一外部命令调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
命令一律以参数列表传递，不经过 shell 拼接。
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol

from gitdeps.core.exceptions import ExternalProcessError

logger = logging.getLogger(__name__)

# 错误信息中保留的 stderr 最大长度
MAX_STDERR_CHARS = 2000


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    测试时可注入 mock 实现，无需 patch subprocess。
    """

    def execute(
        self,
        args: list[str],
        *,
        cwd: str | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        args: list[str],
        *,
        cwd: str | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        try:
            r = subprocess.run(
                args, capture_output=True, text=True,
                cwd=cwd, check=False, timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ExternalProcessError(f"找不到可执行文件: {args[0]}", stderr=str(e)) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalProcessError(
                f"命令超时 ({timeout}s): {' '.join(args)}",
                stderr=str(e.stderr or ""),
            ) from e
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


def run_checked(
    args: list[str], *,
    cwd: str | None = None,
    timeout: int | None = None,
    label: str = "cmd",
    executor: CommandExecutor | None = None,
) -> CommandResult:
    """执行命令，非零退出码抛 ExternalProcessError（携带 stderr）

    Args:
        args: 命令参数列表
        cwd: 工作目录
        timeout: 超时秒数，None 表示不限
        label: 日志标签
        executor: 命令执行器，不传则使用全局默认
    """
    logger.debug("  %s: %s (cwd=%s)", label, args, cwd)
    r = (executor or get_executor()).execute(args, cwd=cwd, timeout=timeout)
    if not r.success:
        stderr = r.stderr.strip()
        raise ExternalProcessError(
            f"{label}失败 (rc={r.returncode}): {stderr[:MAX_STDERR_CHARS]}",
            stderr=stderr,
            returncode=r.returncode,
        )
    return r
