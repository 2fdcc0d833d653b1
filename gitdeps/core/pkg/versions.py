"""语义版本解析与范围匹配

版本与范围的语义由 semantic_version 提供:
  - Version: 严格的 semver 2.0 版本（major.minor.patch[-pre][+build]）
  - NpmSpec: npm 风格范围（^1.2.0、~1.2、>=1.0 <2、1.2.x、1.0 - 2.0、||）
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import semantic_version as semver
from semantic_version.base import AllOf, AnyOf, Clause, Range

from gitdeps.core.exceptions import VersionParseError

logger = logging.getLogger(__name__)


def _strip_v(text: str) -> str:
    # vX.Y.Z -> X.Y.Z
    if len(text) > 1 and text[0] in "vV" and text[1].isdigit():
        return text[1:]
    return text


def parse_version(text: str) -> semver.Version:
    """解析语义版本，允许标签常见的 v 前缀"""
    try:
        return semver.Version(_strip_v(text.strip()))
    except (ValueError, AttributeError) as e:
        raise VersionParseError(f"无效的语义版本: {text!r}") from e


def parse_range(text: str) -> semver.NpmSpec:
    """解析版本范围表达式"""
    try:
        return semver.NpmSpec(text.strip())
    except (ValueError, AttributeError) as e:
        raise VersionParseError(f"无效的版本范围: {text!r}") from e


def satisfies(version: semver.Version, version_range: semver.NpmSpec) -> bool:
    return version_range.match(version)


def best_match(
    candidates: Iterable[semver.Version],
    version_range: semver.NpmSpec,
) -> semver.Version | None:
    """从候选版本中选出满足范围的最大版本

    总是取最大值而不是第一个匹配项，结果与候选顺序无关。
    """
    return max(
        (v for v in candidates if version_range.match(v)),
        default=None,
    )


def _clause_minimum(clause: Clause) -> semver.Version | None:
    """子句树的下界: AnyOf 取各分支最小值，AllOf 取各比较项最大值"""
    if isinstance(clause, (AnyOf, AllOf)):
        lows = [v for v in map(_clause_minimum, clause.clauses) if v is not None]
        if not lows:
            return None
        return min(lows) if isinstance(clause, AnyOf) else max(lows)
    # 预发布上界拆分时生成的辅助下界 (prerelease_policy=always) 不是用户写的约束
    if isinstance(clause, Range) and clause.prerelease_policy != Range.PRERELEASE_ALWAYS:
        if clause.operator in (Range.OP_GTE, Range.OP_EQ):
            return clause.target
        if clause.operator == Range.OP_GT:
            return clause.target.next_patch()
    return None


def range_minimum(text: str) -> semver.Version | None:
    """范围表达式允许的最低版本

    基于 NpmSpec 解析后的子句树计算，与比较项的书写顺序无关，
    例如 "<2.0.0 >=1.5.0" -> 1.5.0。没有下界的分支（如 "<2.0.0"）不参与计算；
    "*" 的下界为 0.0.0。
    """
    return _clause_minimum(parse_range(text).clause)


def tags_to_versions(tags: Iterable[str]) -> dict[semver.Version, str]:
    """将标签名映射为语义版本 -> 原始标签名

    同一版本出现多次（如 1.0.0 与 v1.0.0）时保留第一个标签。
    不是语义版本的标签直接跳过。
    """
    result: dict[semver.Version, str] = {}
    for tag in tags:
        try:
            version = parse_version(tag)
        except VersionParseError:
            logger.debug("跳过非语义版本标签: %s", tag)
            continue
        result.setdefault(version, tag)
    return result
