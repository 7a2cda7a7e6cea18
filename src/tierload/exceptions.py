# -*- coding: utf-8 -*-
"""
tierload 核心异常

数据问题（缺失依赖、循环依赖、层级违规）通过 ValidationIssue 报告，
这里的异常只用于前置条件被破坏、文件加载失败或宿主选择快速失败的情况。
"""


class TierLoadError(Exception):
    """所有 tierload 自定义异常的基类。"""

    pass


# region 清单异常


class ManifestError(TierLoadError):
    """与插件清单相关的错误的基类。"""

    pass


class ManifestLoadError(ManifestError, ValueError):
    """当无法读取或解析清单文件时引发。"""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"加载插件清单失败 {path}: {message}")


# endregion

# region 配置异常


class TierCatalogError(TierLoadError, ValueError):
    """当层级目录配置无效或无法加载时引发。"""

    pass


class ConfigurationError(TierLoadError, ValueError):
    """当解析器配置无效时引发。"""

    pass


# endregion

# region 解析异常


class ResolutionFailedError(TierLoadError):
    """
    宿主要求快速失败且解析结果存在问题时引发。

    异常携带完整的解析结果，调用方仍然可以读取全部问题列表。
    """

    def __init__(self, result):
        self.result = result
        kinds = ", ".join(sorted({issue.kind.value for issue in result.issues}))
        super().__init__(f"插件解析失败，共 {len(result.issues)} 个问题: {kinds}")


# endregion
