"""
Division record model.

A DivisionRecord is one flat row of the administrative-division dataset.
Records carry no tree relationships; the hierarchy builder links them
through ``parent_code``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Parent code of a top-level (province-equivalent) division
NO_PARENT = "0"

# Synthetic national root
ROOT_CODE = "000000000000"
ROOT_NAME = "中华人民共和国"
ROOT_LEVEL = 0

# Text marker the source uses for a missing employment rate
EMPLOYMENT_RATE_NA = "N/A"

# Index = level number: 0 national ... 5 village
LEVEL_NAMES = (
    "国家级",
    "省级",
    "地级",
    "县级",
    "乡级",
    "村级",
)


@dataclass(frozen=True)
class DivisionRecord:
    """
    One administrative division as read from the source.

    Attributes:
        code: Unique fixed-format identifier, e.g. "110101000000".
        name: Display name, e.g. "东城区".
        level: Administrative depth, 0 (national) to 5 (village).
        parent_code: Code of the parent division, NO_PARENT for top level.
        type: Classification tag from the source dataset.
        avg_house_price: Average house price, None when absent.
        employment_rate: Employment rate text, None when absent.
    """

    code: str
    name: str
    level: int
    parent_code: str
    type: int = 0
    avg_house_price: float | None = None
    employment_rate: str | None = None

    @property
    def is_top_level(self) -> bool:
        """True when the record hangs directly under the national root."""
        return self.parent_code == NO_PARENT

    @property
    def level_name(self) -> str | None:
        """Chinese name of the level, None when out of range."""
        if 0 <= self.level < len(LEVEL_NAMES):
            return LEVEL_NAMES[self.level]
        return None

    @classmethod
    def root(cls) -> DivisionRecord:
        """Record for the synthetic national root."""
        return cls(
            code=ROOT_CODE,
            name=ROOT_NAME,
            level=ROOT_LEVEL,
            parent_code=NO_PARENT,
            type=0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "level": self.level,
            "parent_code": self.parent_code,
            "type": self.type,
            "avg_house_price": self.avg_house_price,
            "employment_rate": self.employment_rate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DivisionRecord:
        employment_rate = data.get("employment_rate")
        if employment_rate == EMPLOYMENT_RATE_NA:
            employment_rate = None
        price = data.get("avg_house_price")
        return cls(
            code=str(data["code"]),
            name=data["name"],
            level=int(data["level"]),
            parent_code=str(data["parent_code"]),
            type=int(data.get("type", 0)),
            avg_house_price=float(price) if price is not None else None,
            employment_rate=employment_rate,
        )
