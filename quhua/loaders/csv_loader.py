"""
CSV region loader.

Reads the division dataset in its delimited text form:

    code,name,level,parent_code,type[,avg_house_price[,employment_rate]]

The first line is a header when it does not parse as a record. Lines that
cannot be parsed are skipped and reported as warnings.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import ClassVar

from quhua.core.region import EMPLOYMENT_RATE_NA, DivisionRecord
from quhua.loaders.base import BaseLoader, LoaderRegistry

logger = logging.getLogger(__name__)

# Capacity of the national dataset as shipped
DEFAULT_MAX_RECORDS = 700_000

_REQUIRED_FIELDS = 5
_ENCODINGS = ("utf-8-sig", "gb18030")


@LoaderRegistry.register
class CSVRegionLoader(BaseLoader):
    """
    Load division records from a CSV file.

    Args:
        max_records: Stop reading once this many records are loaded.
        delimiter: Field separator.
    """

    SUPPORTED_EXTENSIONS: ClassVar[list[str]] = [".csv", ".txt"]
    LOADER_NAME: ClassVar[str] = "csv"

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS, delimiter: str = ",") -> None:
        super().__init__()
        self.max_records = max_records
        self.delimiter = delimiter

    def load(self, path: Path) -> list[DivisionRecord]:
        """Load a CSV file into records, in file order."""
        self.reset_messages()

        for encoding in _ENCODINGS:
            try:
                text = path.read_text(encoding=encoding)
            except UnicodeDecodeError:
                continue
            except OSError as e:
                raise self.fail(f"Failed to read region file: {e}", path, details=str(e)) from e
            if encoding != _ENCODINGS[0]:
                self.warnings.append(f"Used fallback encoding: {encoding}")
            return self.parse_lines(text.splitlines())

        raise self.fail(
            "Could not decode region file with any supported encoding",
            path,
            details=f"Tried: {', '.join(_ENCODINGS)}",
        )

    def parse_lines(self, lines: list[str]) -> list[DivisionRecord]:
        """Parse already-read lines into records."""
        records: list[DivisionRecord] = []
        reader = csv.reader(lines, delimiter=self.delimiter)

        for line_num, row in enumerate(reader, start=1):
            if not any(cell.strip() for cell in row):
                continue
            if len(records) >= self.max_records:
                self.warnings.append(
                    f"Stopped at line {line_num}: limit of {self.max_records} records reached"
                )
                logger.warning("Record limit %d reached, rest of file ignored", self.max_records)
                break

            record = self.parse_row(row)
            if record is not None:
                records.append(record)
            elif line_num == 1:
                self.info.append(f"Treated first line as header: {','.join(row)}")
            else:
                self.warnings.append(f"Skipped malformed line {line_num}: {','.join(row)}")

        if self.warnings:
            logger.warning("%d lines skipped or flagged while loading regions", len(self.warnings))
        logger.info("Loaded %d region records", len(records))
        return records

    @staticmethod
    def parse_row(row: list[str]) -> DivisionRecord | None:
        """Turn one CSV row into a record, or None if it does not parse."""
        fields = [cell.strip() for cell in row]
        if len(fields) < _REQUIRED_FIELDS:
            return None

        code, name, level_text, parent_code, type_text = fields[:_REQUIRED_FIELDS]
        if not code or not name or not parent_code:
            return None
        try:
            level = int(level_text)
            region_type = int(type_text)
        except ValueError:
            return None

        price: float | None = None
        if len(fields) > 5 and fields[5]:
            try:
                price = float(fields[5])
            except ValueError:
                price = None

        employment_rate: str | None = None
        if len(fields) > 6 and fields[6] and fields[6] != EMPLOYMENT_RATE_NA:
            employment_rate = fields[6]

        return DivisionRecord(
            code=code,
            name=name,
            level=level,
            parent_code=parent_code,
            type=region_type,
            avg_house_price=price,
            employment_rate=employment_rate,
        )
