# -*- coding: utf-8 -*-
"""
解析入口测试
"""

import logging

import pytest
import yaml

from tierload.config.settings import ResolverSettings
from tierload.dependency.issues import IssueKind
from tierload.dependency.resolution import ResolutionContext, resolve
from tierload.exceptions import ResolutionFailedError


@pytest.fixture
def game_manifests(manifest_factory):
    """一组跨层级的插件清单"""
    return [
        manifest_factory("LablabBean.Plugins.Quest", 25100, depends=["LablabBean.Contracts.Quest", "LablabBean.Plugins.Inventory"]),
        manifest_factory("LablabBean.Contracts.Quest", 20000),
        manifest_factory("LablabBean.Plugins.Inventory", 15100, depends=["LablabBean.Contracts.Inventory"]),
        manifest_factory("LablabBean.Contracts.Inventory", 10000, optional=["LablabBean.Plugins.Analytics"]),
        manifest_factory("LablabBean.Plugins.Logging", 5000),
        manifest_factory("LablabBean.Contracts.Core", 1),
    ]


class TestResolve:
    """测试 resolve"""

    def test_clean_resolution(self, game_manifests, catalog):
        result = resolve(game_manifests, catalog)

        assert result.succeeded
        assert result.is_clean
        assert list(result.ordered_ids) == [
            "LablabBean.Contracts.Core",
            "LablabBean.Plugins.Logging",
            "LablabBean.Contracts.Inventory",
            "LablabBean.Plugins.Inventory",
            "LablabBean.Contracts.Quest",
            "LablabBean.Plugins.Quest",
        ]

    def test_order_kept_with_tier_violations(self, manifest_factory, catalog):
        """测试只有层级问题时仍给出加载顺序"""
        manifests = [
            manifest_factory("A", 15100, depends=["B"]),
            manifest_factory("B", 25100),
        ]
        result = resolve(manifests, catalog)

        assert result.succeeded
        assert list(result.ordered_ids) == ["B", "A"]
        assert [i.kind for i in result.issues] == [IssueKind.TIER_DEPENDENCY_VIOLATION]

    def test_all_issue_kinds_collected(self, manifest_factory, catalog):
        """测试所有问题一次性汇总，按类型排序"""
        manifests = [
            manifest_factory("dup", 100),
            manifest_factory("dup", 200),
            manifest_factory("needs_ghost", 300, depends=["ghost"]),
            manifest_factory("cycle_a", 400, depends=["cycle_b"]),
            manifest_factory("cycle_b", 500, depends=["cycle_a"]),
            manifest_factory("out_of_range", 0),
            manifest_factory("general", 15000, depends=["specific"]),
            manifest_factory("specific", 25000),
        ]
        result = resolve(manifests, catalog)

        assert [i.kind for i in result.issues] == [
            IssueKind.DUPLICATE_IDENTITY,
            IssueKind.MISSING_HARD_DEPENDENCY,
            IssueKind.CIRCULAR_DEPENDENCY,
            IssueKind.PRIORITY_OUT_OF_RANGE,
            IssueKind.TIER_DEPENDENCY_VIOLATION,
        ]
        assert not result.succeeded
        assert result.ordered_ids == ()

    def test_cycle_reported_once(self, manifest_factory, catalog):
        """测试循环依赖只由解析器报告一次"""
        manifests = [
            manifest_factory("A", 1, depends=["B"]),
            manifest_factory("B", 2, depends=["C"]),
            manifest_factory("C", 3, depends=["A"]),
        ]
        result = resolve(manifests, catalog)
        cycles = result.issues_of(IssueKind.CIRCULAR_DEPENDENCY)
        assert len(cycles) == 1
        assert cycles[0].plugin_ids == ("A", "B", "C")

    def test_optional_dependency_tolerance(self, manifest_factory, catalog):
        """测试可选依赖缺失无问题，改为硬依赖后报告缺失"""
        optional = resolve([manifest_factory("A", 100, optional=["ghost"])], catalog)
        assert optional.is_clean
        assert list(optional.ordered_ids) == ["A"]

        hard = resolve([manifest_factory("A", 100, depends=["ghost"])], catalog)
        missing = hard.issues_of(IssueKind.MISSING_HARD_DEPENDENCY)
        assert len(missing) == 1
        assert missing[0].plugin_ids == ("A", "ghost")
        assert list(hard.ordered_ids) == ["A"]

    def test_idempotent_and_input_order_independent(self, game_manifests, catalog):
        first = resolve(game_manifests, catalog)
        second = resolve(game_manifests, catalog)
        reversed_input = resolve(list(reversed(game_manifests)), catalog)
        assert first == second == reversed_input
        assert first.to_dict() == second.to_dict()

    def test_none_inputs_rejected(self, catalog):
        with pytest.raises(ValueError):
            resolve([], None)
        with pytest.raises(ValueError):
            resolve(None, catalog)

    def test_issues_logged(self, manifest_factory, catalog, caplog):
        with caplog.at_level(logging.WARNING, logger="tierload.dependency.resolution"):
            resolve([manifest_factory("A", 0)], catalog)
        assert "PriorityOutOfRange" in caplog.text

    def test_to_dict(self, manifest_factory, catalog):
        result = resolve(
            [manifest_factory("A", 15100, depends=["B"]), manifest_factory("B", 25100)],
            catalog,
        )
        data = result.to_dict()
        assert data["succeeded"] is True
        assert data["ordered_ids"] == ["B", "A"]
        assert data["issues"][0]["kind"] == "TierDependencyViolation"
        assert data["issues"][0]["tiers"] == ["GameGeneral", "GameSpecific"]


class TestResolutionContext:
    """测试 ResolutionContext"""

    def test_advisory_policy(self, manifest_factory, catalog):
        context = ResolutionContext(catalog=catalog)
        result = context.resolve([manifest_factory("A", 0)])
        assert not result.is_clean
        assert list(result.ordered_ids) == ["A"]

    def test_fail_fast_policy(self, manifest_factory, catalog):
        context = ResolutionContext(catalog=catalog, settings=ResolverSettings(fail_on_issues=True))
        with pytest.raises(ResolutionFailedError) as exc_info:
            context.resolve([manifest_factory("A", 0)])
        assert exc_info.value.result.issues[0].kind == IssueKind.PRIORITY_OUT_OF_RANGE

        assert context.resolve([manifest_factory("A", 100)]).is_clean

    def test_from_settings_default_catalog(self):
        context = ResolutionContext.from_settings()
        assert context.catalog.tier_names == ("Essential", "GameGeneral", "GameSpecific")

    def test_from_settings_custom_catalog(self, tmp_path, sample_catalog_data):
        path = tmp_path / "tiers.yaml"
        path.write_text(yaml.safe_dump(sample_catalog_data), encoding="utf-8")
        context = ResolutionContext.from_settings(ResolverSettings(tier_config=str(path)))
        assert context.catalog.tier_names == ("Essential", "GameGeneral")

    def test_catalog_required(self):
        with pytest.raises(ValueError):
            ResolutionContext(catalog=None)
