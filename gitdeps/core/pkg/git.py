"""Git 命令行协作者

所有命令以参数列表形式交给 CommandExecutor，不做字符串拼接。
非零退出码统一转换为携带 stderr 的 ExternalProcessError。
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitdeps.core.exceptions import ExternalProcessError
from gitdeps.core.pkg.versions import tags_to_versions
from gitdeps.utils.shell import CommandExecutor, CommandResult, get_executor, run_checked

logger = logging.getLogger(__name__)

_TAG_REF_PREFIX = "refs/tags/"
_PEELED_SUFFIX = "^{}"


def parse_ls_remote_tags(output: str) -> list[str]:
    """解析 git ls-remote --tags 输出，返回去重后的标签名（保持出现顺序）

    注解标签会额外出现一行 <sha> refs/tags/<tag>^{}，去掉后缀后与原标签合并。
    """
    tags: list[str] = []
    seen: set[str] = set()
    for line in output.splitlines():
        _, sep, tag = line.partition(_TAG_REF_PREFIX)
        if not sep:
            continue
        tag = tag.strip()
        if tag.endswith(_PEELED_SUFFIX):
            tag = tag[: -len(_PEELED_SUFFIX)]
        if tag and tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tags


class GitClient:
    """基于 git 命令行的版本控制实现"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
        git_binary: str = "git",
    ) -> None:
        self._executor = executor
        self.timeout = timeout
        self.git_binary = git_binary

    def _git(self, *args: str, label: str) -> CommandResult:
        return run_checked(
            [self.git_binary, *args],
            timeout=self.timeout,
            label=label,
            executor=self._executor or get_executor(),
        )

    def clone(self, url: str, dest: Path) -> None:
        logger.info("  git clone %s -> %s", url, dest)
        self._git("clone", url, str(dest), label="git clone")

    def fetch_tags(self, repo_dir: Path) -> None:
        self._git("-C", str(repo_dir), "fetch", "--tags", "--force", label="git fetch")

    def checkout_tag(self, repo_dir: Path, tag: str) -> None:
        logger.info("  git checkout -f tags/%s (%s)", tag, repo_dir.name)
        self._git("-C", str(repo_dir), "checkout", "-f", f"tags/{tag}", label="git checkout")

    def list_remote_tags(self, url: str) -> list[str]:
        r = self._git("ls-remote", "--tags", url, label="git ls-remote")
        return parse_ls_remote_tags(r.stdout)

    def describe_tag(self, repo_dir: Path) -> str | None:
        """HEAD 上的标签名；有多个时取语义版本最大的一个

        只看精确指向 HEAD 的标签（git tag --points-at HEAD），
        不会返回 describe 风格的 1.0.0-3-gabc。
        HEAD 上没有任何语义版本标签时返回第一个标签，没有标签返回 None。
        """
        if not repo_dir.is_dir():
            return None
        try:
            r = self._git(
                "-C", str(repo_dir), "tag", "--points-at", "HEAD", label="git tag",
            )
        except ExternalProcessError as e:
            logger.debug("无法确定当前标签: %s - %s", repo_dir, e)
            return None
        tags = [line.strip() for line in r.stdout.splitlines() if line.strip()]
        if not tags:
            return None
        versions = tags_to_versions(tags)
        if not versions:
            return tags[0]
        return versions[max(versions)]
