# -*- coding: utf-8 -*-
"""
全局测试配置
提供基本的测试环境设置和共享fixture
"""

from typing import Iterable, Optional, Union

import pytest

from tierload.dependency.manifest import Dependency, PluginManifest
from tierload.dependency.tiers import TierCatalog


def make_manifest(
    plugin_id: str,
    priority: Optional[int] = None,
    depends: Iterable[Union[str, Dependency]] = (),
    optional: Iterable[str] = (),
    **kwargs,
) -> PluginManifest:
    """快速创建插件清单：depends 为硬依赖，optional 为可选依赖"""
    dependencies = [Dependency(id=d) if isinstance(d, str) else d for d in depends]
    dependencies.extend(Dependency(id=d, optional=True) for d in optional)
    return PluginManifest(id=plugin_id, priority=priority, dependencies=dependencies, **kwargs)


@pytest.fixture
def manifest_factory():
    """插件清单工厂"""
    return make_manifest


@pytest.fixture(scope="session")
def catalog() -> TierCatalog:
    """内置的默认层级目录"""
    return TierCatalog.load_default()


@pytest.fixture
def sample_catalog_data():
    """示例层级配置"""
    return {
        "tiers": [
            {
                "name": "Essential",
                "low": 1,
                "high": 9999,
                "categories": [
                    {"name": "Core", "low": 1, "high": 4999},
                    {"name": "Plugin", "low": 5000, "high": 9999},
                ],
                "dependency_rules": [],
            },
            {
                "name": "GameGeneral",
                "range": [10000, 19999],
                "categories": [
                    {"name": "Core", "range": [10000, 14999]},
                    {"name": "Plugin", "range": [15000, 19999]},
                ],
                "dependency_rules": ["Essential"],
            },
        ]
    }
