"""Import a region CSV into SQLite, optionally searching the result.

Run:
    python scripts/import_regions.py area_code_2024.csv areas.db
    python scripts/import_regions.py area_code_2024.csv areas.db --search 东城
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from quhua.errors import QuhuaError
from quhua.loaders import CSVRegionLoader
from quhua.query import level_label
from quhua.storage import RegionStorage

logger = logging.getLogger("quhua.scripts.import")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import region CSV into SQLite.")
    parser.add_argument("csv_path", type=Path, help="Region CSV file")
    parser.add_argument("db_path", type=Path, help="SQLite database to (re)create")
    parser.add_argument("--search", help="Name substring to search after import")
    parser.add_argument("--limit", type=int, default=100, help="Maximum rows for --search")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    loader = CSVRegionLoader()
    try:
        records = loader.load_records(args.csv_path)
        with RegionStorage(args.db_path) as store:
            store.initialize_schema(reset=True)
            count = store.import_records(records)
            print(f"总共导入 {count} 条记录")

            if args.search:
                rows = store.search_by_name(args.search, limit=args.limit)
                if not rows:
                    print(f"未找到包含 '{args.search}' 的地区")
                for row in rows:
                    record = row.record
                    indent = "  " * row.depth
                    print(f"{indent}{record.code} - {record.name} ({level_label(record.level)})")
    except QuhuaError as exc:
        logger.error("Import failed: %s", exc)
        return 1

    for warning in loader.warnings:
        logger.warning(warning)
    return 0


if __name__ == "__main__":
    sys.exit(main())
