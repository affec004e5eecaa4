"""Query and build configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DuplicatePolicy(str, Enum):
    """How the builder treats two records that share a code."""

    FIRST_WINS = "first_wins"
    REJECT = "reject"


@dataclass
class QueryConfig:
    """Configuration for building and querying a region tree."""

    # Name search
    name_search_limit: int = 5  # Maximum matches returned by a name search
    count_all_matches: bool = False  # Finish the traversal to get exact totals

    # Code lookup
    retain_index: bool = True  # Keep a code -> node map after build

    # Data quality
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST_WINS

    def __post_init__(self) -> None:
        if self.name_search_limit < 1:
            raise ValueError("name_search_limit must be at least 1")
        self.duplicate_policy = DuplicatePolicy(self.duplicate_policy)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name_search_limit": self.name_search_limit,
            "count_all_matches": self.count_all_matches,
            "retain_index": self.retain_index,
            "duplicate_policy": self.duplicate_policy.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueryConfig:
        defaults = cls()
        return cls(
            name_search_limit=data.get("name_search_limit", defaults.name_search_limit),
            count_all_matches=data.get("count_all_matches", defaults.count_all_matches),
            retain_index=data.get("retain_index", defaults.retain_index),
            duplicate_policy=DuplicatePolicy(
                data.get("duplicate_policy", defaults.duplicate_policy.value)
            ),
        )
