# -*- coding: utf-8 -*-
"""
tierload 配置模块
"""

from .base_config import BaseConfig
from .settings import ResolverSettings

__all__ = ["BaseConfig", "ResolverSettings"]
