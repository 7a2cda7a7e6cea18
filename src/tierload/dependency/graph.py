# -*- coding: utf-8 -*-
"""
依赖图构建

把一组插件清单转换为以插件标识为节点的有向图，并在构建时报告重复标识和缺失的硬依赖。
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from .issues import IssueKind, ValidationIssue, sort_issues
from .manifest import PluginManifest
from .tiers import TierCatalog


class DependencyGraph:
    """
    插件依赖图

    节点为插件标识，节点属性 ``manifest`` 保存对应清单。
    图中的边按加载方向存储：依赖 -> 依赖者，因此节点入度即为尚未加载的依赖数量。
    """

    def __init__(self, graph: Optional[nx.DiGraph] = None):
        self._graph = graph if graph is not None else nx.DiGraph()

    def add_plugin(self, manifest: PluginManifest) -> None:
        self._graph.add_node(manifest.id, manifest=manifest)

    def add_dependency(self, plugin_id: str, dependency_id: str) -> None:
        """记录 plugin_id 依赖 dependency_id，两端必须都已是图中节点"""
        for node in (plugin_id, dependency_id):
            if node not in self._graph:
                raise KeyError(f"依赖图中不存在插件: {node}")
        self._graph.add_edge(dependency_id, plugin_id)

    def __contains__(self, plugin_id: str) -> bool:
        return plugin_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def nx_graph(self) -> nx.DiGraph:
        """底层 networkx 图（按加载方向）"""
        return self._graph

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def plugin_ids(self) -> List[str]:
        return sorted(self._graph.nodes)

    def get_manifest(self, plugin_id: str) -> PluginManifest:
        return self._graph.nodes[plugin_id]["manifest"]

    def priority_of(self, plugin_id: str) -> int:
        return self.get_manifest(plugin_id).effective_priority

    def sort_key_of(self, plugin_id: str) -> Tuple[bool, int]:
        return self.get_manifest(plugin_id).sort_key

    def dependencies_of(self, plugin_id: str) -> List[str]:
        """插件的直接依赖"""
        return sorted(self._graph.predecessors(plugin_id))

    def dependents_of(self, plugin_id: str) -> List[str]:
        """直接依赖该插件的其他插件"""
        return sorted(self._graph.successors(plugin_id))

    def transitive_dependencies(self, plugin_id: str) -> List[str]:
        """插件直接或间接依赖的全部插件"""
        return sorted(nx.ancestors(self._graph, plugin_id))

    def edges(self) -> List[Tuple[str, str]]:
        """以 (依赖者, 被依赖者) 形式返回所有依赖边"""
        return sorted((plugin_id, dep_id) for dep_id, plugin_id in self._graph.edges)

    def get_statistics(self) -> Dict[str, int]:
        """获取统计信息"""
        return {
            "graph_nodes": self.node_count,
            "graph_edges": self.edge_count,
        }


class DependencyGraphBuilder:
    """
    依赖图构建器

    - 重复标识: 每个重复标识报告一次 DuplicateIdentity，所有同名清单都不进入图
    - 缺失的硬依赖: 每对 (依赖者, 缺失目标) 报告一次 MissingHardDependency，依赖者保留在图中
    - 缺失的可选依赖: 直接忽略，不产生排序约束
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def build(
        self,
        manifests: Iterable[PluginManifest],
        catalog: TierCatalog,
    ) -> Tuple[DependencyGraph, List[ValidationIssue]]:
        """
        构建依赖图

        Args:
            manifests: 本次解析的全部插件清单
            catalog: 层级目录（构建阶段不做层级检查）

        Returns:
            (依赖图, 构建阶段发现的问题列表)

        Raises:
            ValueError: manifests 或 catalog 为 None
        """
        if manifests is None:
            raise ValueError("插件清单集合不能为 None")
        if catalog is None:
            raise ValueError("层级目录不能为 None")

        manifests = list(manifests)
        issues: List[ValidationIssue] = []

        counts = Counter(manifest.id for manifest in manifests)
        duplicated: Set[str] = {plugin_id for plugin_id, count in counts.items() if count > 1}
        for plugin_id in sorted(duplicated):
            issues.append(
                ValidationIssue(
                    kind=IssueKind.DUPLICATE_IDENTITY,
                    plugin_ids=(plugin_id,),
                    detail=f"插件标识 {plugin_id} 被 {counts[plugin_id]} 个清单重复使用，均未加入依赖图",
                )
            )

        # 有序插入节点，保证图的遍历顺序与输入顺序无关
        accepted = sorted(
            (m for m in manifests if m.id not in duplicated), key=lambda m: m.id
        )
        graph = DependencyGraph()
        for manifest in accepted:
            graph.add_plugin(manifest)

        for manifest in accepted:
            for dependency in manifest.dependencies:
                if dependency.id in graph:
                    graph.add_dependency(manifest.id, dependency.id)
                elif dependency.id in duplicated:
                    self.logger.debug(
                        f"{manifest.id} -> {dependency.id}: 目标标识重复，忽略该依赖边"
                    )
                elif dependency.optional:
                    self.logger.debug(
                        f"{manifest.id} -> {dependency.id}: 可选依赖不存在，已忽略"
                    )
                else:
                    issues.append(
                        ValidationIssue(
                            kind=IssueKind.MISSING_HARD_DEPENDENCY,
                            plugin_ids=(manifest.id, dependency.id),
                            detail=f"插件 {manifest.id} 依赖的插件 {dependency.id} 不存在",
                        )
                    )

        self.logger.debug(
            f"依赖图构建完成: {graph.node_count} 个节点, {graph.edge_count} 条边, "
            f"{len(issues)} 个问题"
        )
        return graph, sort_issues(issues)
