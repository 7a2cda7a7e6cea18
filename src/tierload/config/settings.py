# -*- coding: utf-8 -*-
"""
解析器配置

宿主通过配置决定解析出现问题时的处理策略：快速失败，或记录后继续加载。
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import Field, ValidationError, field_validator

from ..exceptions import ConfigurationError
from .base_config import BaseConfig

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ResolverSettings(BaseConfig):
    """解析器配置"""

    fail_on_issues: bool = Field(default=False, description="存在任何问题时是否视为失败")
    tier_config: Optional[str] = Field(default=None, description="层级配置文件路径，为空时使用内置目录")
    manifest_dir: Optional[str] = Field(default=None, description="插件清单目录")
    recursive: bool = Field(default=True, description="是否递归扫描插件清单目录")
    log_level: str = Field(default="INFO", description="日志级别")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"无效的日志级别: {v}")
        return level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def load_from_file(
        cls, path: Union[str, Path], env: Optional[str] = None
    ) -> "ResolverSettings":
        """从 YAML 文件加载配置"""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"配置文件不存在: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            raise ConfigurationError(f"读取配置文件失败 {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"配置文件内容必须是映射: {path}")

        try:
            return cls.load_from_dict(data, env=env)
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"配置验证失败 {path}: {e}") from e
