# -*- coding: utf-8 -*-
"""
插件清单模型

定义插件的标识、优先级和依赖声明，以及清单文件的加载。
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

from ..exceptions import ManifestLoadError

logger = logging.getLogger(__name__)

# 未声明优先级时 effective_priority 报告的值；排序使用 PluginManifest.sort_key
UNSET_PRIORITY = 2**31 - 1

MANIFEST_FILENAMES = (
    "plugin_manifest.yaml",
    "plugin_manifest.yml",
    "plugin_manifest.json",
)


class Dependency(BaseModel):
    """对另一个插件的依赖声明"""

    id: str = Field(..., min_length=1, description="被依赖插件的标识")
    optional: bool = Field(default=False, description="是否为可选依赖")

    model_config = ConfigDict(frozen=True)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("依赖标识不能为空")
        return v


class PluginManifest(BaseModel):
    """
    插件清单模型

    id、priority、dependencies 是解析所需的字段；其余字段只作描述用途，
    tier/category 是插件在外部配置中声明的目标层级和类别，仅用于层级校验。
    """

    # 解析字段
    id: str = Field(..., min_length=1, description="插件唯一标识")
    priority: Optional[StrictInt] = Field(
        default=None, description="加载优先级，越小越先加载"
    )
    dependencies: Tuple[Dependency, ...] = Field(
        default_factory=tuple, description="依赖列表"
    )

    # 声明的层级归属
    tier: Optional[str] = Field(default=None, description="声明的层级名称")
    category: Optional[str] = Field(default=None, description="声明的类别（Core/Plugin）")

    # 描述信息
    name: Optional[str] = Field(default=None, description="显示名称")
    version: Optional[str] = Field(default=None, description="插件版本")
    description: str = Field(default="", description="插件描述")
    author: Optional[str] = Field(default=None, description="插件作者")

    model_config = ConfigDict(frozen=True)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """验证插件标识"""
        v = v.strip()
        if not v:
            raise ValueError("插件标识不能为空")
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def coerce_dependencies(cls, v: Any) -> Any:
        """允许用字符串简写硬依赖"""
        if v is None:
            return ()
        if isinstance(v, (list, tuple)):
            return [{"id": item} if isinstance(item, str) else item for item in v]
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: Optional[str]) -> Optional[str]:
        """验证版本格式"""
        if v is None:
            return v
        from packaging import version

        try:
            version.parse(v)
        except version.InvalidVersion:
            raise ValueError(f"无效的版本格式: {v}")
        return v

    @property
    def has_priority(self) -> bool:
        return self.priority is not None

    @property
    def effective_priority(self) -> int:
        """数值优先级，未声明时为 UNSET_PRIORITY"""
        return UNSET_PRIORITY if self.priority is None else self.priority

    @property
    def sort_key(self) -> Tuple[bool, int]:
        """就绪集合中的排序键：未声明优先级的插件总在显式优先级之后，与数值大小无关"""
        return (self.priority is None, self.priority if self.priority is not None else 0)

    @property
    def hard_dependencies(self) -> List[Dependency]:
        return [dep for dep in self.dependencies if not dep.optional]

    @property
    def optional_dependencies(self) -> List[Dependency]:
        return [dep for dep in self.dependencies if dep.optional]

    @property
    def display_name(self) -> str:
        return self.name or self.id


class ManifestLoader:
    """
    插件清单加载器

    负责从 YAML/JSON 文件读取插件清单。解析核心本身不做任何 I/O，
    这里是宿主在调用解析前完成的准备步骤。
    """

    @staticmethod
    def load_from_file(manifest_path: Path) -> PluginManifest:
        """从文件加载插件清单"""
        manifest_path = Path(manifest_path)
        if not manifest_path.exists():
            raise ManifestLoadError(manifest_path, "文件不存在")

        suffix = manifest_path.suffix.lower()
        try:
            with open(manifest_path, "r", encoding="utf-8") as f:
                if suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise ManifestLoadError(manifest_path, f"不支持的清单文件格式: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError, OSError) as e:
            raise ManifestLoadError(manifest_path, str(e)) from e

        if not isinstance(data, dict):
            raise ManifestLoadError(manifest_path, "清单内容必须是映射")

        try:
            return PluginManifest(**data)
        except ValidationError as e:
            raise ManifestLoadError(manifest_path, str(e)) from e

    @classmethod
    def load_directory(
        cls, directory: Path, recursive: bool = True, strict: bool = False
    ) -> List[PluginManifest]:
        """
        从目录加载所有插件清单

        Args:
            directory: 插件目录
            recursive: 是否递归扫描；否则只扫描目录本身和一级子目录
            strict: 为 True 时任一清单加载失败即抛出异常，否则记录错误并跳过

        Returns:
            按文件路径排序的插件清单列表
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ManifestLoadError(directory, "插件目录不存在")

        manifest_files: List[Path] = []
        for filename in MANIFEST_FILENAMES:
            if recursive:
                manifest_files.extend(directory.rglob(filename))
            else:
                manifest_files.extend(directory.glob(filename))
                manifest_files.extend(directory.glob(f"*/{filename}"))
        manifest_files.sort()

        logger.info(f"在 {directory} 中找到 {len(manifest_files)} 个插件清单文件")

        manifests = []
        for manifest_file in manifest_files:
            try:
                manifests.append(cls.load_from_file(manifest_file))
            except ManifestLoadError as e:
                if strict:
                    raise
                logger.error(str(e))

        logger.info(f"从 {directory} 成功加载了 {len(manifests)} 个插件清单")
        return manifests
