"""进程级包操作锁

install / uninstall 在整个执行期间（包括 git 子进程与文件操作）持有同一把锁，
任意两次安装/卸载不会并发执行。锁可重入：install 失败回滚时会在持锁状态下
调用 uninstall。
"""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_PACKAGE_LOCK = threading.RLock()


def package_lock() -> threading.RLock:
    """获取进程级包操作锁"""
    return _PACKAGE_LOCK


def serialized(func: F) -> F:
    """装饰器: 在进程级包操作锁内执行，任何退出路径都会释放锁"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with _PACKAGE_LOCK:
            return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
