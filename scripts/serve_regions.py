"""Serve region lookups over HTTP.

Run: python scripts/serve_regions.py area_code_2024.csv --port 8430
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from quhua.config import QueryConfig
from quhua.errors import QuhuaError
from quhua.loaders import LoaderRegistry
from quhua.server import app, init_region_tree

logger = logging.getLogger("quhua")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve region lookups over HTTP.")
    parser.add_argument("csv_path", type=Path, help="Region CSV file")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8430)
    parser.add_argument("--limit", type=int, default=5, help="Default name search limit")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        records = LoaderRegistry.load_records(args.csv_path)
        init_region_tree(records, QueryConfig(name_search_limit=args.limit))
    except QuhuaError as exc:
        logger.error("Startup aborted: %s", exc)
        return 1

    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
