# -*- coding: utf-8 -*-
"""
层级校验器

检查每个插件的优先级是否落在其层级/类别区间内，以及每条依赖边是否符合层级间允许的依赖方向。
校验只做诊断，不修改也不剔除任何插件；所有问题累积后一次性返回。
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .issues import IssueKind, ValidationIssue, sort_issues
from .manifest import PluginManifest
from .tiers import TierCatalog, TierDefinition


class TierValidator:
    """
    层级校验器

    Args:
        catalog: 层级目录
    """

    def __init__(self, catalog: TierCatalog):
        if catalog is None:
            raise ValueError("层级目录不能为 None")
        self.catalog = catalog
        self.logger = logging.getLogger(__name__)

    def validate(
        self,
        manifests: Iterable[PluginManifest],
        cycle_issues: Iterable[ValidationIssue] = (),
    ) -> List[ValidationIssue]:
        """
        校验一组插件清单

        Args:
            manifests: 插件清单集合
            cycle_issues: 拓扑解析器报告的循环依赖问题，原样并入结果

        Returns:
            排序后的问题列表
        """
        if manifests is None:
            raise ValueError("插件清单集合不能为 None")

        manifests = list(manifests)
        issues: List[ValidationIssue] = []

        for manifest in manifests:
            issues.extend(self.check_range(manifest))

        by_id: Dict[str, List[PluginManifest]] = defaultdict(list)
        for manifest in manifests:
            by_id[manifest.id].append(manifest)

        for manifest in manifests:
            issues.extend(self.check_dependency_directions(manifest, by_id))

        issues.extend(cycle_issues)

        result = sort_issues(issues)
        self.logger.debug(f"层级校验完成: {len(manifests)} 个插件, {len(result)} 个问题")
        return result

    def implied_tier(self, manifest: PluginManifest) -> Optional[TierDefinition]:
        """由优先级推导出的层级"""
        if not manifest.has_priority:
            return None
        return self.catalog.tier_for_priority(manifest.priority)

    def check_range(self, manifest: PluginManifest) -> List[ValidationIssue]:
        """检查优先级区间以及声明的层级/类别是否与优先级一致"""
        issues: List[ValidationIssue] = []

        def out_of_range(detail: str, *tiers: str) -> None:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.PRIORITY_OUT_OF_RANGE,
                    plugin_ids=(manifest.id,),
                    detail=detail,
                    tiers=tuple(tiers),
                )
            )

        declared = None
        declared_unknown = False
        if manifest.tier is not None:
            declared = self.catalog.get_tier(manifest.tier)
            declared_unknown = declared is None
            if declared_unknown:
                out_of_range(f"插件 {manifest.id} 声明的层级 {manifest.tier} 不存在")

        if not manifest.has_priority:
            out_of_range(f"插件 {manifest.id} 未声明优先级，无法确定所属层级")
            return issues

        priority = manifest.priority
        tier, category = self.catalog.category_for_priority(priority)

        if tier is None:
            if declared is not None:
                out_of_range(
                    f"插件 {manifest.id} 的优先级 {priority} 不在声明层级 {declared.name} "
                    f"的区间 [{declared.low}, {declared.high}] 内，也不属于任何其他层级",
                    declared.name,
                )
            else:
                out_of_range(f"插件 {manifest.id} 的优先级 {priority} 不在任何层级区间内")
            return issues

        if category is None:
            out_of_range(
                f"插件 {manifest.id} 的优先级 {priority} 位于层级 {tier.name} 内，"
                f"但不属于任何类别区间",
                tier.name,
            )

        if declared is not None and declared.name != tier.name:
            out_of_range(
                f"插件 {manifest.id} 声明层级 {declared.name} [{declared.low}, {declared.high}]，"
                f"但优先级 {priority} 属于层级 {tier.name}",
                declared.name,
                tier.name,
            )
        elif manifest.category is not None and not declared_unknown:
            if tier.get_category(manifest.category) is None:
                out_of_range(
                    f"插件 {manifest.id} 声明的类别 {manifest.category} 在层级 {tier.name} 中不存在",
                    tier.name,
                )
            elif category is not None and category.name != manifest.category:
                out_of_range(
                    f"插件 {manifest.id} 声明类别 {manifest.category}，"
                    f"但优先级 {priority} 属于 {tier.name}/{category.name}",
                    tier.name,
                )

        return issues

    def check_dependency_directions(
        self,
        manifest: PluginManifest,
        by_id: Dict[str, List[PluginManifest]],
    ) -> List[ValidationIssue]:
        """检查插件的每条依赖边是否符合层级依赖规则"""
        issues: List[ValidationIssue] = []

        source_tier = self.implied_tier(manifest)
        if source_tier is None:
            return issues

        for dependency in manifest.dependencies:
            for target in by_id.get(dependency.id, ()):
                target_tier = self.implied_tier(target)
                if target_tier is None:
                    continue
                if self.catalog.allows_dependency(source_tier.name, target_tier.name):
                    continue
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.TIER_DEPENDENCY_VIOLATION,
                        plugin_ids=(manifest.id, target.id),
                        detail=(
                            f"层级 {source_tier.name} 的插件 {manifest.id} 不允许依赖"
                            f"层级 {target_tier.name} 的插件 {target.id}"
                        ),
                        tiers=(source_tier.name, target_tier.name),
                    )
                )
        return issues
