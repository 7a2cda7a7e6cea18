# -*- coding: utf-8 -*-
"""
解析入口

把依赖图构建、拓扑解析和层级校验串联为一次解析调用。
解析过程同步、无副作用，不在调用之间保留任何状态。
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..config.settings import ResolverSettings
from .graph import DependencyGraphBuilder
from .issues import ResolutionResult, sort_issues
from .manifest import PluginManifest
from .resolver import TopologicalResolver
from .tiers import TierCatalog
from .validator import TierValidator

logger = logging.getLogger(__name__)


def resolve(manifests: Iterable[PluginManifest], catalog: TierCatalog) -> ResolutionResult:
    """
    解析插件加载顺序并校验层级规则

    Args:
        manifests: 本次解析的全部插件清单
        catalog: 层级目录

    Returns:
        ResolutionResult。只要没有循环依赖，ordered_ids 就会给出加载顺序，
        层级问题和缺失依赖只作为问题报告，由宿主决定如何处理。

    Raises:
        ValueError: manifests 或 catalog 为 None
    """
    if manifests is None:
        raise ValueError("插件清单集合不能为 None")
    if catalog is None:
        raise ValueError("层级目录不能为 None")

    manifests = list(manifests)
    logger.info(f"开始解析 {len(manifests)} 个插件")

    graph, build_issues = DependencyGraphBuilder().build(manifests, catalog)
    order = TopologicalResolver().resolve(graph)
    tier_issues = TierValidator(catalog).validate(manifests, cycle_issues=order.issues)

    result = ResolutionResult(
        ordered_ids=order.ordered_ids,
        issues=tuple(sort_issues([*build_issues, *tier_issues])),
        blocked_ids=order.blocked_ids,
    )

    for issue in result.issues:
        logger.warning(str(issue))
    if result.succeeded:
        logger.info(f"依赖解析完成，加载顺序: {list(result.ordered_ids)}")
    else:
        logger.error("依赖解析失败，存在循环依赖，未生成加载顺序")
    return result


@dataclass(frozen=True)
class ResolutionContext:
    """
    解析上下文

    显式携带层级目录和宿主配置，解析时不读取任何全局状态。
    """

    catalog: TierCatalog
    settings: ResolverSettings = field(default_factory=ResolverSettings)

    def __post_init__(self):
        if self.catalog is None:
            raise ValueError("层级目录不能为 None")

    @classmethod
    def from_settings(cls, settings: Optional[ResolverSettings] = None) -> "ResolutionContext":
        """按配置加载层级目录并创建上下文"""
        settings = settings or ResolverSettings()
        if settings.tier_config:
            catalog = TierCatalog.load_from_file(settings.tier_config)
        else:
            catalog = TierCatalog.load_default()
        return cls(catalog=catalog, settings=settings)

    def resolve(self, manifests: Iterable[PluginManifest]) -> ResolutionResult:
        """
        解析并应用宿主策略

        Raises:
            ResolutionFailedError: 配置了 fail_on_issues 且存在问题
        """
        result = resolve(manifests, self.catalog)
        if self.settings.fail_on_issues:
            result.raise_for_issues()
        return result
