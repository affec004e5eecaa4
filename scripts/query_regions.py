"""Interactive region query menu.

Loads a region CSV, builds the tree and answers lookups until the user
quits:

    1. look up a region by code
    2. search regions by name
    3. quit

Run: python scripts/query_regions.py area_code_2024.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from quhua.config import QueryConfig
from quhua.errors import QuhuaError
from quhua.hierarchy import HierarchyBuilder
from quhua.loaders import CSVRegionLoader
from quhua.query import RegionQueryEngine, format_lookup, format_search
from quhua.validation import ErrorFormatter, InputValidator, ValidationError

logger = logging.getLogger("quhua.scripts.query")

_MENU = """
┌────────────────────────────────┐
│     行政区划数据查询系统       │
├────────────────────────────────┤
│  1. 按代码查询地区信息         │
│  2. 按名称查询地区信息         │
│  3. 退出系统                   │
└────────────────────────────────┘"""
_RESULT_TOP = "\n┌────────────── 查询结果 ──────────────┐\n"
_RESULT_BOTTOM = "\n└─────────────────────────────────────┘"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query administrative divisions.")
    parser.add_argument("csv_path", type=Path, help="Region CSV file")
    parser.add_argument("--limit", type=int, default=5, help="Maximum name matches shown")
    parser.add_argument(
        "--loose-codes", action="store_true", help="Accept codes shorter than 12 digits"
    )
    parser.add_argument("--verbose", action="store_true", help="Log build progress")
    return parser.parse_args(argv)


def _ask(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def run_menu(engine: RegionQueryEngine, validator: InputValidator) -> None:
    """Serve menu choices until the user quits or input ends."""
    formatter = ErrorFormatter()
    while True:
        print(_MENU)
        choice = _ask("\n请输入选项编号 [1-3]: ")
        if choice is None:
            return
        choice = choice.strip()

        if choice == "1":
            raw = _ask("请输入12位区划代码：")
            if raw is None:
                return
            try:
                code = validator.validate_code(raw)
            except ValidationError as exc:
                print(f"\n{formatter.format_query_error(exc)}")
                continue
            print(_RESULT_TOP)
            print(format_lookup(engine.find_by_code(code)))
            print(_RESULT_BOTTOM)
        elif choice == "2":
            raw = _ask("请输入地区名称：")
            if raw is None:
                return
            try:
                pattern = validator.validate_name_query(raw)
            except ValidationError as exc:
                print(f"\n{formatter.format_query_error(exc)}")
                continue
            print(_RESULT_TOP)
            print(format_search(engine.find_by_name(pattern)))
            print(_RESULT_BOTTOM)
        elif choice == "3":
            print("\n=== 正在退出系统 ===")
            return
        else:
            print("\n无效的选择，请输入 1-3")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    formatter = ErrorFormatter()

    print("\n=== 中国行政区划数据管理与查询系统 ===")
    loader = CSVRegionLoader()
    try:
        records = loader.load_records(args.csv_path)
    except QuhuaError as exc:
        print(f"错误：数据加载失败 - {formatter.format_load_error(exc)}")
        return 1
    if not records:
        print("错误：数据加载失败 - 文件中没有有效记录")
        return 1

    config = QueryConfig(name_search_limit=args.limit)
    try:
        tree = HierarchyBuilder.build(records, config=config)
    except QuhuaError as exc:
        logger.error("Tree build failed: %r", exc)
        print(f"错误：树结构构建失败 - {formatter.format_build_error(exc)}")
        return 1
    print(f"成功加载 {len(records)} 条区划数据，树结构构建完成")

    try:
        run_menu(RegionQueryEngine(tree, config), InputValidator(strict_codes=not args.loose_codes))
    finally:
        tree.release()
    return 0


if __name__ == "__main__":
    sys.exit(main())
