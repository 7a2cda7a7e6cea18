# -*- coding: utf-8 -*-
"""
层级目录

描述架构层级（Tier）、层级内的类别子区间（Core/Plugin）以及层级之间允许的依赖方向。
目录只加载一次，在整个进程内作为只读配置使用。
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..exceptions import TierCatalogError

DEFAULT_TIERS_FILE = Path(__file__).with_name("default_tiers.yaml")


def _split_range(data: Any) -> Any:
    """支持 ``range: [low, high]`` 的简写形式"""
    if isinstance(data, dict) and "range" in data:
        data = dict(data)
        bounds = data.pop("range")
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise ValueError(f"range 必须是 [low, high] 形式: {bounds}")
        data.setdefault("low", bounds[0])
        data.setdefault("high", bounds[1])
    return data


class CategoryRange(BaseModel):
    """层级内的类别子区间，闭区间 [low, high]"""

    name: str = Field(..., min_length=1)
    low: int
    high: int

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_range(cls, data: Any) -> Any:
        return _split_range(data)

    @model_validator(mode="after")
    def _check_bounds(self) -> "CategoryRange":
        if self.low > self.high:
            raise ValueError(f"类别 {self.name} 的区间下界大于上界: [{self.low}, {self.high}]")
        return self

    def contains(self, priority: int) -> bool:
        return self.low <= priority <= self.high


class TierDefinition(BaseModel):
    """
    层级定义

    dependency_rules 列出本层级插件可以依赖的其他层级；同层级之间的依赖总是允许的。
    """

    name: str = Field(..., min_length=1)
    low: int
    high: int
    categories: Tuple[CategoryRange, ...] = Field(..., min_length=1)
    dependency_rules: Tuple[str, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_range(cls, data: Any) -> Any:
        return _split_range(data)

    @model_validator(mode="after")
    def _check_categories(self) -> "TierDefinition":
        if self.low > self.high:
            raise ValueError(f"层级 {self.name} 的区间下界大于上界: [{self.low}, {self.high}]")

        names = [category.name for category in self.categories]
        if len(names) != len(set(names)):
            raise ValueError(f"层级 {self.name} 中存在重名类别: {names}")

        for category in self.categories:
            if category.low < self.low or category.high > self.high:
                raise ValueError(
                    f"类别 {self.name}/{category.name} [{category.low}, {category.high}] "
                    f"超出层级区间 [{self.low}, {self.high}]"
                )

        ordered = sorted(self.categories, key=lambda c: c.low)
        for previous, current in zip(ordered, ordered[1:]):
            if current.low <= previous.high:
                raise ValueError(
                    f"层级 {self.name} 中类别 {previous.name} 与 {current.name} 的区间重叠"
                )
        return self

    def contains(self, priority: int) -> bool:
        return self.low <= priority <= self.high

    def category_for(self, priority: int) -> Optional[CategoryRange]:
        for category in self.categories:
            if category.contains(priority):
                return category
        return None

    def get_category(self, name: str) -> Optional[CategoryRange]:
        for category in self.categories:
            if category.name == name:
                return category
        return None


class TierCatalog(BaseModel):
    """
    层级目录

    按声明顺序保存所有层级定义，层级区间互不重叠。
    """

    tiers: Tuple[TierDefinition, ...] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_tiers(self) -> "TierCatalog":
        names = [tier.name for tier in self.tiers]
        if len(names) != len(set(names)):
            raise ValueError(f"存在重名层级: {names}")

        ordered = sorted(self.tiers, key=lambda t: t.low)
        for previous, current in zip(ordered, ordered[1:]):
            if current.low <= previous.high:
                raise ValueError(f"层级 {previous.name} 与 {current.name} 的区间重叠")

        known = set(names)
        for tier in self.tiers:
            unknown = [rule for rule in tier.dependency_rules if rule not in known]
            if unknown:
                raise ValueError(f"层级 {tier.name} 的依赖规则引用了未知层级: {unknown}")
        return self

    @property
    def tier_names(self) -> Tuple[str, ...]:
        return tuple(tier.name for tier in self.tiers)

    def get_tier(self, name: str) -> Optional[TierDefinition]:
        for tier in self.tiers:
            if tier.name == name:
                return tier
        return None

    def tier_for_priority(self, priority: int) -> Optional[TierDefinition]:
        """返回区间包含该优先级的层级"""
        for tier in self.tiers:
            if tier.contains(priority):
                return tier
        return None

    def category_for_priority(
        self, priority: int
    ) -> Tuple[Optional[TierDefinition], Optional[CategoryRange]]:
        """返回包含该优先级的 (层级, 类别)，找不到时对应位置为 None"""
        tier = self.tier_for_priority(priority)
        if tier is None:
            return None, None
        return tier, tier.category_for(priority)

    def allows_dependency(self, from_tier: str, to_tier: str) -> bool:
        """from_tier 中的插件是否可以依赖 to_tier 中的插件"""
        if from_tier == to_tier:
            return True
        tier = self.get_tier(from_tier)
        if tier is None:
            return False
        return to_tier in tier.dependency_rules

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], list]) -> "TierCatalog":
        """从已解析的配置数据创建层级目录"""
        if isinstance(data, list):
            data = {"tiers": data}
        if not isinstance(data, dict):
            raise TierCatalogError(f"层级配置必须是映射或列表，实际为 {type(data).__name__}")
        try:
            return cls(**data)
        except ValidationError as e:
            raise TierCatalogError(f"层级配置无效: {e}") from e

    @classmethod
    def load_from_file(cls, path: Union[str, Path]) -> "TierCatalog":
        """从 YAML 或 JSON 文件加载层级目录"""
        path = Path(path)
        logger = logging.getLogger(__name__)

        if not path.exists():
            raise TierCatalogError(f"层级配置文件不存在: {path}")

        suffix = path.suffix.lower()
        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise TierCatalogError(f"不支持的层级配置格式: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError, OSError) as e:
            raise TierCatalogError(f"读取层级配置失败 {path}: {e}") from e

        catalog = cls.from_dict(data)
        logger.info(f"从 {path} 加载了 {len(catalog.tiers)} 个层级: {list(catalog.tier_names)}")
        return catalog

    @classmethod
    def load_default(cls) -> "TierCatalog":
        """加载内置的默认层级目录"""
        return cls.load_from_file(DEFAULT_TIERS_FILE)
