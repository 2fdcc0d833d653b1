"""进程级包操作锁测试"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest
from conftest import FakeGit

from gitdeps.core.pkg.lock import package_lock, serialized
from gitdeps.services.container import ServiceContainer


class TestSerialized:
    def test_reentrant(self) -> None:
        @serialized
        def outer() -> str:
            return inner()

        @serialized
        def inner() -> str:
            return "ok"

        assert outer() == "ok"

    def test_released_after_exception(self) -> None:
        @serialized
        def boom() -> None:
            raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            boom()

        acquired: list[bool] = []

        def try_acquire() -> None:
            ok = package_lock().acquire(timeout=1)
            acquired.append(ok)
            if ok:
                package_lock().release()

        t = threading.Thread(target=try_acquire)
        t.start()
        t.join()
        assert acquired == [True]

    def test_operations_do_not_overlap(self) -> None:
        active = 0
        overlap: list[int] = []

        @serialized
        def work() -> None:
            nonlocal active
            active += 1
            overlap.append(active)
            time.sleep(0.01)
            active -= 1

        threads = [threading.Thread(target=work) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert max(overlap) == 1


class _SlowGit(FakeGit):
    def __init__(self) -> None:
        super().__init__()
        self.active = 0
        self.peak = 0

    def clone(self, url: str, dest: Path) -> None:
        self.active += 1
        self.peak = max(self.peak, self.active)
        time.sleep(0.02)
        try:
            super().clone(url, dest)
        finally:
            self.active -= 1


class TestInstallerLocking:
    def test_concurrent_installs_serialized(self, config) -> None:  # type: ignore[no-untyped-def]
        git = _SlowGit()
        for name in ("a", "b", "c"):
            git.add_package(f"owner/{name}", "1.0.0")
        container = ServiceContainer(config=config, git=git)
        installer = container.installer

        errors: list[BaseException] = []

        def install(repo: str) -> None:
            try:
                installer.install(repo, "*")
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=install, args=(f"owner/{n}",)) for n in ("a", "b", "c")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert git.peak == 1
        assert len(container.registry) == 3
