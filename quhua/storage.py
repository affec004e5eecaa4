"""SQLite-backed storage for division records.

An alternative to the in-memory tree: records are imported into a single
``areas`` table and ancestor chains are resolved with recursive CTEs.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from quhua.core.region import DivisionRecord
from quhua.errors import QuhuaError

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS areas (
    code TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    level INTEGER NOT NULL,
    parent_code TEXT NOT NULL,
    type INTEGER NOT NULL DEFAULT 0,
    avg_house_price REAL,
    employment_rate TEXT
);

CREATE INDEX IF NOT EXISTS idx_areas_parent ON areas(parent_code);
CREATE INDEX IF NOT EXISTS idx_areas_name ON areas(name);
"""

_ANCESTORS_SQL = """
WITH RECURSIVE chain(code, parent_code, depth) AS (
    SELECT code, parent_code, 0 FROM areas WHERE code = ?
    UNION ALL
    SELECT a.code, a.parent_code, chain.depth + 1
    FROM areas a JOIN chain ON a.code = chain.parent_code
    WHERE chain.depth < ?
)
SELECT areas.* FROM chain JOIN areas ON areas.code = chain.code
WHERE chain.depth > 0
ORDER BY chain.depth
"""

_SEARCH_SQL = """
WITH RECURSIVE ancestors(code, parent_code, depth) AS (
    SELECT code, parent_code, 0 FROM areas WHERE instr(name, ?) > 0
    UNION ALL
    SELECT a.code, a.parent_code, ancestors.depth + 1
    FROM areas a JOIN ancestors ON a.code = ancestors.parent_code
    WHERE ancestors.depth < ?
)
SELECT areas.*, ancestors.depth AS depth
FROM ancestors JOIN areas ON areas.code = ancestors.code
ORDER BY ancestors.depth DESC, areas.code
LIMIT ?
"""

# Deepest level is 5; the bound only stops corrupt cyclic chains
_MAX_CHAIN_DEPTH = 16


class RegionStorageError(QuhuaError):
    """Raised for storage-level errors (duplicates, bad schema, etc.)."""


@dataclass
class StoredMatch:
    """A row from a name search over the store.

    Attributes:
        record: The matching region or one of its ancestors.
        depth: 0 for a direct match, n for its n-th ancestor.
    """

    record: DivisionRecord
    depth: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {**self.record.to_dict(), "depth": self.depth}


class RegionStorage:
    """SQLite-backed storage for division records.

    Args:
        db_path: Path to SQLite database file, or ':memory:' for in-memory.

    Example::

        with RegionStorage("areas.db") as store:
            store.initialize_schema()
            store.import_records(records)
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        self._conn = sqlite3.connect(self._db_path)
        self._conn.row_factory = sqlite3.Row

    def __enter__(self) -> RegionStorage:
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Close the database connection."""
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def initialize_schema(self, reset: bool = False) -> None:
        """Create the table and indexes if they don't exist.

        Args:
            reset: Drop existing region data first.
        """
        if reset:
            self._conn.execute("DROP TABLE IF EXISTS areas")
        self._conn.executescript(_SCHEMA_SQL)
        self._conn.commit()

    def import_records(self, records: Iterable[DivisionRecord]) -> int:
        """Insert records in a single transaction.

        Args:
            records: Records to insert.

        Returns:
            Number of records inserted.

        Raises:
            RegionStorageError: If a code already exists; nothing is inserted.
        """
        rows = [
            (
                r.code,
                r.name,
                r.level,
                r.parent_code,
                r.type,
                r.avg_house_price,
                r.employment_rate,
            )
            for r in records
        ]
        try:
            with self._conn:
                self._conn.executemany(
                    "INSERT INTO areas "
                    "(code, name, level, parent_code, type, avg_house_price, employment_rate) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    rows,
                )
        except sqlite3.IntegrityError as exc:
            raise RegionStorageError(f"Region import failed: {exc}") from exc
        except sqlite3.OperationalError as exc:
            raise RegionStorageError(f"Region table not available: {exc}") from exc
        logger.info("Imported %d regions into %s", len(rows), self._db_path)
        return len(rows)

    def count(self) -> int:
        """Number of stored regions."""
        return self._conn.execute("SELECT COUNT(*) FROM areas").fetchone()[0]

    def get_region(self, code: str) -> DivisionRecord | None:
        """Fetch a region by code.

        Returns:
            DivisionRecord or None if not found.
        """
        row = self._conn.execute("SELECT * FROM areas WHERE code = ?", (code,)).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def load_records(self) -> list[DivisionRecord]:
        """All stored regions in insertion order, ready for the tree builder."""
        rows = self._conn.execute("SELECT * FROM areas ORDER BY rowid").fetchall()
        return [self._row_to_record(r) for r in rows]

    def get_ancestors(self, code: str) -> list[DivisionRecord]:
        """Ancestors of a region, child-to-root, excluding the region itself.

        Returns:
            Empty list for top-level or unknown regions.
        """
        rows = self._conn.execute(_ANCESTORS_SQL, (code, _MAX_CHAIN_DEPTH)).fetchall()
        return [self._row_to_record(r) for r in rows]

    def search_by_name(self, name: str, limit: int = 100) -> list[StoredMatch]:
        """Find regions whose name contains ``name``, with their ancestors.

        Matching is case-sensitive. Rows are ordered deepest ancestor first,
        then by code.

        Args:
            name: Substring to look for.
            limit: Maximum rows returned (matches and ancestors together).

        Returns:
            List of StoredMatch rows; empty when nothing matches.
        """
        rows = self._conn.execute(_SEARCH_SQL, (name, _MAX_CHAIN_DEPTH, limit)).fetchall()
        return [StoredMatch(record=self._row_to_record(r), depth=r["depth"]) for r in rows]

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> DivisionRecord:
        """Convert a database row to a DivisionRecord."""
        return DivisionRecord(
            code=row["code"],
            name=row["name"],
            level=row["level"],
            parent_code=row["parent_code"],
            type=row["type"],
            avg_house_price=row["avg_house_price"],
            employment_rate=row["employment_rate"],
        )
