# -*- coding: utf-8 -*-
"""
插件依赖解析系统

提供插件清单、层级目录、依赖图构建、加载顺序解析和层级校验。
"""

from .graph import DependencyGraph, DependencyGraphBuilder
from .issues import IssueKind, ResolutionResult, ValidationIssue
from .manifest import UNSET_PRIORITY, Dependency, ManifestLoader, PluginManifest
from .resolution import ResolutionContext, resolve
from .resolver import TopologicalResolver
from .tiers import CategoryRange, TierCatalog, TierDefinition
from .validator import TierValidator

__all__ = [
    "PluginManifest",
    "Dependency",
    "ManifestLoader",
    "UNSET_PRIORITY",
    "TierCatalog",
    "TierDefinition",
    "CategoryRange",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "TopologicalResolver",
    "TierValidator",
    "IssueKind",
    "ValidationIssue",
    "ResolutionResult",
    "ResolutionContext",
    "resolve",
]
