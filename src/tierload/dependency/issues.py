# -*- coding: utf-8 -*-
"""
校验问题与解析结果

解析和校验只通过结构化结果报告数据问题，不抛出异常。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from ..exceptions import ResolutionFailedError


class IssueKind(str, Enum):
    """问题类型"""

    DUPLICATE_IDENTITY = "DuplicateIdentity"
    MISSING_HARD_DEPENDENCY = "MissingHardDependency"
    CIRCULAR_DEPENDENCY = "CircularDependency"
    PRIORITY_OUT_OF_RANGE = "PriorityOutOfRange"
    TIER_DEPENDENCY_VIOLATION = "TierDependencyViolation"


# 报告中的排列顺序
_KIND_RANK = {kind: rank for rank, kind in enumerate(IssueKind)}


@dataclass(frozen=True)
class ValidationIssue:
    """
    单个校验问题

    Attributes:
        kind: 问题类型
        plugin_ids: 涉及的插件标识
        detail: 可读的问题描述
        tiers: 涉及的层级名称（仅层级依赖违规时填写）
    """

    kind: IssueKind
    plugin_ids: Tuple[str, ...]
    detail: str
    tiers: Tuple[str, ...] = ()

    def sort_key(self) -> Tuple[int, Tuple[str, ...], str, Tuple[str, ...]]:
        return (_KIND_RANK[self.kind], self.plugin_ids, self.detail, self.tiers)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "plugin_ids": list(self.plugin_ids),
            "detail": self.detail,
        }
        if self.tiers:
            data["tiers"] = list(self.tiers)
        return data

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.detail}"


def sort_issues(issues: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    """按类型、插件标识排序，去掉完全相同的重复项"""
    return sorted(set(issues), key=ValidationIssue.sort_key)


@dataclass(frozen=True)
class ResolutionResult:
    """
    一次解析调用的结果

    没有循环依赖时 ordered_ids 即为加载顺序（即使存在层级问题）；
    存在循环依赖时 ordered_ids 为空，blocked_ids 列出因依赖循环而无法加载、
    但自身不在环上的插件。
    """

    ordered_ids: Tuple[str, ...] = ()
    issues: Tuple[ValidationIssue, ...] = ()
    blocked_ids: Tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        """是否得到了加载顺序"""
        return not self.issues_of(IssueKind.CIRCULAR_DEPENDENCY)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    def issues_of(self, kind: IssueKind) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.kind == kind]

    def raise_for_issues(self) -> None:
        """存在任何问题时抛出 ResolutionFailedError（由宿主决定是否调用）"""
        if self.issues:
            raise ResolutionFailedError(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "ordered_ids": list(self.ordered_ids),
            "blocked_ids": list(self.blocked_ids),
            "issues": [issue.to_dict() for issue in self.issues],
        }
