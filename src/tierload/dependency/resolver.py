# -*- coding: utf-8 -*-
"""
拓扑解析器

在依赖图上计算加载顺序：依赖总是先于依赖者加载，优先级只在同时可加载的插件之间决定先后。
"""

import heapq
import logging
from typing import Dict, List, Set, Tuple

import networkx as nx

from .graph import DependencyGraph
from .issues import IssueKind, ResolutionResult, ValidationIssue, sort_issues


class TopologicalResolver:
    """
    基于优先级的 Kahn 拓扑排序

    每一步从就绪集合（依赖已全部加载的插件）中取出优先级最小的插件；
    优先级相同时按插件标识的字节序升序，保证相同输入总是得到相同顺序。
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def resolve(self, graph: DependencyGraph) -> ResolutionResult:
        """
        计算加载顺序

        Args:
            graph: 依赖图

        Returns:
            解析结果。存在循环依赖时 ordered_ids 为空，
            issues 中每个依赖环对应一个 CircularDependency 问题。
        """
        if graph is None:
            raise ValueError("依赖图不能为 None")

        g = graph.nx_graph
        in_degree: Dict[str, int] = {node: g.in_degree(node) for node in g.nodes}

        ready: List[Tuple[Tuple[bool, int], str]] = [
            (graph.sort_key_of(node), node) for node, degree in in_degree.items() if degree == 0
        ]
        heapq.heapify(ready)

        order: List[str] = []
        while ready:
            _, node = heapq.heappop(ready)
            order.append(node)
            self.logger.debug(f"加载 {node} (优先级 {graph.get_manifest(node).priority})")

            for dependent in g.successors(node):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(ready, (graph.sort_key_of(dependent), dependent))

        if len(order) == len(in_degree):
            return ResolutionResult(ordered_ids=tuple(order))

        remaining = set(in_degree) - set(order)
        issues, on_cycle = self._find_cycles(g, remaining)
        blocked = sorted(remaining - on_cycle)

        self.logger.error(
            f"检测到 {len(issues)} 个依赖环，{len(remaining)} 个插件无法加载"
        )
        return ResolutionResult(
            ordered_ids=(),
            issues=tuple(sort_issues(issues)),
            blocked_ids=tuple(blocked),
        )

    def _find_cycles(
        self, g: nx.DiGraph, remaining: Set[str]
    ) -> Tuple[List[ValidationIssue], Set[str]]:
        """把未加载的插件划分为依赖环，返回 (问题列表, 环上的插件)"""
        sub = g.subgraph(remaining)
        issues: List[ValidationIssue] = []
        on_cycle: Set[str] = set()

        components = sorted(
            (sorted(component) for component in nx.strongly_connected_components(sub)),
            key=lambda members: members[0],
        )
        for members in components:
            if len(members) == 1 and not sub.has_edge(members[0], members[0]):
                continue

            on_cycle.update(members)
            path = self._cycle_path(sub.subgraph(members), members[0])
            issues.append(
                ValidationIssue(
                    kind=IssueKind.CIRCULAR_DEPENDENCY,
                    plugin_ids=tuple(members),
                    detail=f"检测到循环依赖: {' -> '.join(path)}",
                )
            )
        return issues, on_cycle

    @staticmethod
    def _cycle_path(component: nx.DiGraph, source: str) -> List[str]:
        """在强连通分量中找出一条具体的环，按“依赖于”方向列出"""
        cycle_edges = nx.find_cycle(component.reverse(copy=False), source=source)
        path = [u for u, _ in cycle_edges]
        path.append(cycle_edges[0][0])
        return path
