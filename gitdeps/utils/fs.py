"""文件系统工具 — 原子写入与带重试的目录删除"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
import tempfile
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write(path: Path, content: str) -> None:
    """原子写入文件：先写临时文件再 rename，防止中途崩溃导致损坏

    参数:
        path: 目标文件路径
        content: 要写入的内容

    异常:
        OSError: 文件写入或移动失败
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        dir=str(path.parent), suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        # 只捕获普通异常，不拦截 KeyboardInterrupt/SystemExit
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def _make_writable_and_retry(func, path, _exc) -> None:  # type: ignore[no-untyped-def]
    """git 对象文件默认只读，删除失败时去掉只读位后重试一次"""
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD)
    func(path)


def remove_tree(path: str | Path, *, attempts: int = 10, delay: float = 0.1) -> bool:
    """递归删除目录，失败时按固定间隔重试

    外部进程可能短暂持有目录中的文件句柄，因此删除失败不立即报错。
    超过重试次数后记录错误并保留残留，不抛异常。

    返回:
        bool: 目录最终是否已不存在
    """
    p = Path(path)
    for attempt in range(1, attempts + 1):
        if not p.exists():
            return True
        try:
            if sys.version_info >= (3, 12):
                shutil.rmtree(p, onexc=_make_writable_and_retry)
            else:
                shutil.rmtree(p, onerror=_make_writable_and_retry)
        except OSError as e:
            logger.debug("删除目录失败 (第 %d/%d 次): %s - %s", attempt, attempts, p, e)
            time.sleep(delay)
    if p.exists():
        logger.error("删除目录失败，已达最大重试次数 %d，保留残留: %s", attempts, p)
        return False
    return True
