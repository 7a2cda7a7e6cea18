# -*- coding: utf-8 -*-
"""
tierload: 按依赖关系和架构层级确定插件加载顺序
"""

__author__ = "tierload"
__version__ = "1.0.0"

from .config.settings import ResolverSettings
from .dependency import (
    CategoryRange,
    Dependency,
    DependencyGraph,
    DependencyGraphBuilder,
    IssueKind,
    ManifestLoader,
    PluginManifest,
    ResolutionContext,
    ResolutionResult,
    TierCatalog,
    TierDefinition,
    TierValidator,
    TopologicalResolver,
    ValidationIssue,
    resolve,
)
from .exceptions import (
    ConfigurationError,
    ManifestError,
    ManifestLoadError,
    ResolutionFailedError,
    TierCatalogError,
    TierLoadError,
)

__all__ = [
    # 解析入口
    "resolve",
    "ResolutionContext",
    "ResolutionResult",
    "ResolverSettings",
    # 数据模型
    "PluginManifest",
    "Dependency",
    "ManifestLoader",
    "TierCatalog",
    "TierDefinition",
    "CategoryRange",
    "IssueKind",
    "ValidationIssue",
    # 组件
    "DependencyGraph",
    "DependencyGraphBuilder",
    "TopologicalResolver",
    "TierValidator",
    # 异常
    "TierLoadError",
    "ManifestError",
    "ManifestLoadError",
    "TierCatalogError",
    "ConfigurationError",
    "ResolutionFailedError",
]
