# -*- coding: utf-8 -*-
"""
tierload 命令行接口
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .config.settings import ResolverSettings
from .dependency.issues import ResolutionResult
from .dependency.manifest import ManifestLoader
from .dependency.resolution import ResolutionContext, resolve
from .exceptions import TierLoadError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _print_text(result: ResolutionResult, context: ResolutionContext) -> None:
    """以文本形式打印解析结果"""
    if result.succeeded:
        print("--- 加载顺序 ---")
        for index, plugin_id in enumerate(result.ordered_ids, start=1):
            print(f"{index:>4}. {plugin_id}")
    else:
        print("--- 未生成加载顺序（存在循环依赖） ---")
        if result.blocked_ids:
            print(f"受阻插件: {', '.join(result.blocked_ids)}")

    if result.issues:
        print(f"\n--- 问题 ({len(result.issues)}) ---")
        for issue in result.issues:
            print(str(issue))
    else:
        print("\n未发现问题")

    print("-" * 22)
    print(f"层级: {', '.join(context.catalog.tier_names)}")


def _print_structured(result: ResolutionResult, fmt: str) -> None:
    data = result.to_dict()
    if fmt == "json":
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        print(yaml.safe_dump(data, allow_unicode=True, sort_keys=False), end="")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tierload",
        description="tierload - 按依赖关系和架构层级解析插件加载顺序",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--manifests", "-m", help="插件清单目录")
    parser.add_argument("--tiers", "-t", help="层级配置文件路径 (YAML/JSON)")
    parser.add_argument("--config", "-c", help="YAML 配置文件路径")
    parser.add_argument("--env", help="配置环境，默认读取 APP_ENV")
    parser.add_argument("--strict", action="store_true", help="存在任何问题即返回失败")
    parser.add_argument(
        "--format", "-f", choices=("text", "json", "yaml"), default="text", help="输出格式"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="输出调试日志")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """命令行主入口"""
    args = build_parser().parse_args(argv)

    try:
        if args.config:
            settings = ResolverSettings.load_from_file(args.config, env=args.env)
        else:
            settings = ResolverSettings()

        if args.tiers:
            settings.tier_config = args.tiers
        if args.manifests:
            settings.manifest_dir = args.manifests
        if args.strict:
            settings.fail_on_issues = True

        if not settings.manifest_dir:
            print("未指定插件清单目录 (--manifests 或配置项 manifest_dir)", file=sys.stderr)
            sys.exit(EXIT_USAGE)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else settings.log_level_value,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

        context = ResolutionContext.from_settings(settings)
        manifests = ManifestLoader.load_directory(
            Path(settings.manifest_dir), recursive=settings.recursive
        )
        result = resolve(manifests, context.catalog)

    except TierLoadError as e:
        print(f"运行失败: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    if args.format == "text":
        _print_text(result, context)
    else:
        _print_structured(result, args.format)

    failed = not result.succeeded or (settings.fail_on_issues and not result.is_clean)
    sys.exit(EXIT_FAILED if failed else EXIT_OK)


if __name__ == "__main__":
    main()
