"""shell.py 命令执行器单元测试"""

from __future__ import annotations

import pytest

from gitdeps.core.exceptions import ExternalProcessError
from gitdeps.utils.shell import (
    CommandResult,
    LocalExecutor,
    get_executor,
    run_checked,
    set_executor,
)


class _RecordingExecutor:
    def __init__(self, result: CommandResult) -> None:
        self.result = result
        self.calls: list[tuple[list[str], str | None, int | None]] = []

    def execute(self, args, *, cwd=None, timeout=None) -> CommandResult:  # type: ignore[no-untyped-def]
        self.calls.append((args, cwd, timeout))
        return self.result


class TestRunChecked:
    def test_success(self, tmp_path) -> None:
        r = run_checked(["echo", "hello"], cwd=str(tmp_path), label="test")
        assert r.returncode == 0
        assert "hello" in r.stdout

    def test_failure_raises(self, tmp_path) -> None:
        with pytest.raises(ExternalProcessError, match="cmd失败"):
            run_checked(["false"], cwd=str(tmp_path))

    def test_custom_label_and_stderr(self) -> None:
        fake = _RecordingExecutor(CommandResult(128, "", "fatal: not found\n"))
        with pytest.raises(ExternalProcessError, match="git clone失败") as exc_info:
            run_checked(["git", "clone", "x"], label="git clone", executor=fake)
        assert exc_info.value.stderr == "fatal: not found"
        assert exc_info.value.returncode == 128

    def test_arguments_passed_through(self) -> None:
        fake = _RecordingExecutor(CommandResult(0, "ok", ""))
        run_checked(["git", "status"], cwd="/repo", timeout=5, executor=fake)
        assert fake.calls == [(["git", "status"], "/repo", 5)]

    def test_global_executor_replaced(self) -> None:
        original = get_executor()
        fake = _RecordingExecutor(CommandResult(0, "", ""))
        set_executor(fake)
        try:
            run_checked(["anything"])
        finally:
            set_executor(original)
        assert len(fake.calls) == 1


class TestLocalExecutor:
    def test_missing_binary(self) -> None:
        with pytest.raises(ExternalProcessError, match="找不到可执行文件"):
            LocalExecutor().execute(["definitely-not-a-real-binary-xyz"])

    def test_nonzero_exit_is_returned(self) -> None:
        r = LocalExecutor().execute(["false"])
        assert not r.success
