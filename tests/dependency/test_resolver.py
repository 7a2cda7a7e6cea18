# -*- coding: utf-8 -*-
"""
拓扑解析器测试
"""

import pytest

from tierload.dependency.graph import DependencyGraphBuilder
from tierload.dependency.issues import IssueKind
from tierload.dependency.resolver import TopologicalResolver


@pytest.fixture
def resolve_graph(catalog):
    """构建依赖图并执行拓扑解析"""
    resolver = TopologicalResolver()

    def _resolve(manifests):
        graph, _ = DependencyGraphBuilder().build(manifests, catalog)
        return resolver.resolve(graph)

    return _resolve


class TestTopologicalResolver:
    """测试 TopologicalResolver"""

    def test_dependencies_load_first(self, resolve_graph, manifest_factory):
        """测试依赖先于依赖者加载，即使依赖者优先级更小"""
        manifests = [
            manifest_factory("strategy", 1, depends=["data"]),
            manifest_factory("data", 500, depends=["base"]),
            manifest_factory("base", 900),
        ]
        result = resolve_graph(manifests)

        assert result.succeeded
        assert result.issues == ()
        assert list(result.ordered_ids) == ["base", "data", "strategy"]

    def test_every_edge_respected(self, resolve_graph, manifest_factory):
        """测试所有依赖边都满足先后关系"""
        manifests = [
            manifest_factory("a", 10, depends=["b", "c"]),
            manifest_factory("b", 20, depends=["d"]),
            manifest_factory("c", 5, depends=["d"]),
            manifest_factory("d", 30),
            manifest_factory("e", 1),
        ]
        result = resolve_graph(manifests)
        index = {plugin_id: i for i, plugin_id in enumerate(result.ordered_ids)}

        for manifest in manifests:
            for dependency in manifest.dependencies:
                assert index[dependency.id] < index[manifest.id]
        assert list(result.ordered_ids) == ["e", "d", "c", "b", "a"]

    def test_equal_priority_ties_break_by_id(self, resolve_graph, manifest_factory):
        """测试优先级相同时按标识升序"""
        manifests = [
            manifest_factory("zeta", 100),
            manifest_factory("Alpha", 100),
            manifest_factory("alpha", 100),
            manifest_factory("beta", 100),
        ]
        for _ in range(3):
            result = resolve_graph(manifests)
            # 按字节序比较，大写字母排在小写字母之前
            assert list(result.ordered_ids) == ["Alpha", "alpha", "beta", "zeta"]

    def test_lowest_priority_emitted_first(self, resolve_graph, manifest_factory):
        """测试同时就绪时优先级最小的先加载，与输入顺序无关"""
        manifests = [
            manifest_factory("first_listed", 300),
            manifest_factory("second_listed", 200),
            manifest_factory("last_listed", 100),
        ]
        result = resolve_graph(manifests)
        assert list(result.ordered_ids) == ["last_listed", "second_listed", "first_listed"]

    def test_newly_ready_node_competes_by_priority(self, resolve_graph, manifest_factory):
        """测试新就绪的插件按优先级与已就绪插件竞争"""
        manifests = [
            manifest_factory("root", 10),
            manifest_factory("child", 11, depends=["root"]),
            manifest_factory("sibling", 50),
        ]
        result = resolve_graph(manifests)
        assert list(result.ordered_ids) == ["root", "child", "sibling"]

    def test_unset_priority_sorts_last(self, resolve_graph, manifest_factory):
        """测试未声明优先级的插件排在同层显式优先级之后"""
        manifests = [
            manifest_factory("aaa_unset"),
            manifest_factory("zzz_explicit", 29999),
        ]
        result = resolve_graph(manifests)
        assert list(result.ordered_ids) == ["zzz_explicit", "aaa_unset"]

    @pytest.mark.parametrize("priority", [2**31 - 1, 2**31, 2**40])
    def test_unset_priority_after_huge_explicit(self, resolve_graph, manifest_factory, priority):
        """测试显式优先级即使不小于哨兵值，也排在未声明优先级的插件之前"""
        manifests = [
            manifest_factory("a_unset"),
            manifest_factory("z_explicit", priority),
        ]
        result = resolve_graph(manifests)
        assert list(result.ordered_ids) == ["z_explicit", "a_unset"]

    def test_unset_priority_after_huge_explicit_dependent(self, resolve_graph, manifest_factory):
        """测试新就绪的显式优先级插件同样先于未声明优先级的插件"""
        manifests = [
            manifest_factory("root", 1),
            manifest_factory("a_unset"),
            manifest_factory("z_explicit", 2**31, depends=["root"]),
        ]
        result = resolve_graph(manifests)
        assert list(result.ordered_ids) == ["root", "z_explicit", "a_unset"]

    def test_three_node_cycle(self, resolve_graph, manifest_factory):
        """测试三节点循环依赖：报告全部节点且不返回部分顺序"""
        manifests = [
            manifest_factory("A", 1, depends=["B"]),
            manifest_factory("B", 2, depends=["C"]),
            manifest_factory("C", 3, depends=["A"]),
            manifest_factory("free", 4),
        ]
        result = resolve_graph(manifests)

        assert not result.succeeded
        assert result.ordered_ids == ()
        cycles = result.issues_of(IssueKind.CIRCULAR_DEPENDENCY)
        assert len(cycles) == 1
        assert cycles[0].plugin_ids == ("A", "B", "C")
        assert "A -> B -> C -> A" in cycles[0].detail

    def test_cycles_partitioned(self, resolve_graph, manifest_factory):
        """测试多个环分别报告，环下游的插件列为受阻"""
        manifests = [
            manifest_factory("a1", 1, depends=["a2"]),
            manifest_factory("a2", 1, depends=["a1"]),
            manifest_factory("b1", 1, depends=["b1"]),
            manifest_factory("downstream", 1, depends=["a1", "ok"]),
            manifest_factory("ok", 1),
        ]
        result = resolve_graph(manifests)

        cycles = result.issues_of(IssueKind.CIRCULAR_DEPENDENCY)
        assert [issue.plugin_ids for issue in cycles] == [("a1", "a2"), ("b1",)]
        assert result.blocked_ids == ("downstream",)
        assert result.ordered_ids == ()

    def test_self_dependency_is_cycle(self, resolve_graph, manifest_factory):
        result = resolve_graph([manifest_factory("loop", 1, depends=["loop"])])
        cycles = result.issues_of(IssueKind.CIRCULAR_DEPENDENCY)
        assert cycles[0].plugin_ids == ("loop",)
        assert "loop -> loop" in cycles[0].detail

    def test_empty_graph(self, resolve_graph):
        result = resolve_graph([])
        assert result.succeeded
        assert result.ordered_ids == ()

    def test_idempotent(self, resolve_graph, manifest_factory):
        """测试重复解析结果一致"""
        manifests = [
            manifest_factory("a", 5, depends=["b"]),
            manifest_factory("b", 5),
            manifest_factory("c", 5, depends=["c"]),
        ]
        assert resolve_graph(manifests) == resolve_graph(manifests)

    def test_none_graph_rejected(self):
        with pytest.raises(ValueError):
            TopologicalResolver().resolve(None)
