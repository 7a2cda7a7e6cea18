# -*- coding: utf-8 -*-
"""
tierload 基础配置模块
提供基于 Pydantic 的配置验证机制，支持环境变量解析和多环境配置
"""

import copy
import os
import re
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

T = TypeVar("T", bound="BaseConfig")

# 环境变量匹配模式: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\${([A-Za-z0-9_]+)}")


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    深度合并两个字典，overrides 中的值会覆盖 base 中的值
    """
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class BaseConfig(BaseModel):
    """
    所有配置模型的基类

    1. **严格模式验证**：禁止额外字段，防止配置错误
    2. **环境变量解析**：自动解析 "${VAR_NAME}" 格式的环境变量
    3. **多环境配置**：根据 APP_ENV 环境变量加载不同环境的配置
    """

    @model_validator(mode="before")
    @classmethod
    def _resolve_env_vars(cls, data: Any) -> Any:
        """
        在其他验证执行前递归解析环境变量

        Raises:
            ValueError: 当环境变量未设置时抛出
        """
        if not isinstance(data, dict):
            return data

        def _substitute(match: "re.Match[str]") -> str:
            env_var_name = match.group(1)
            env_var_value = os.getenv(env_var_name)
            if env_var_value is None:
                raise ValueError(f"环境变量 '{env_var_name}' 未设置")
            return env_var_value

        def _resolve(value: Any) -> Any:
            if isinstance(value, str):
                # 变量可以出现在字符串任意位置，如 "${CONF_DIR}/tiers.yaml"
                return ENV_VAR_PATTERN.sub(_substitute, value)
            elif isinstance(value, dict):
                return {k: _resolve(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [_resolve(v) for v in value]
            else:
                return value

        return _resolve(data)

    @classmethod
    def load_from_dict(
        cls: Type[T],
        config_data: Dict[str, Any],
        env: Optional[str] = None,
    ) -> T:
        """
        从字典加载配置，支持环境特定的配置覆盖

        配置结构示例：
        {
            "default": {"fail_on_issues": false},
            "production": {"fail_on_issues": true}
        }

        没有 "default" 段时，整个字典视为基础配置。

        Args:
            config_data: 配置字典
            env: 目标环境，为 None 时使用 os.getenv("APP_ENV", "development")
        """
        if env is None:
            env = os.getenv("APP_ENV", "development")

        if "default" in config_data:
            base_config = config_data.get("default") or {}
            env_config = config_data.get(env) or {}
        else:
            base_config = config_data
            env_config = {}

        return cls(**deep_merge(base_config, env_config))

    # Pydantic v2 配置
    model_config = ConfigDict(
        extra="forbid", validate_assignment=True  # 禁止额外字段  # 赋值时验证
    )
