"""Query engine and result rendering."""

from quhua.query.engine import (
    CodeLookupResult,
    NameSearchResult,
    RegionMatch,
    RegionQueryEngine,
)
from quhua.query.formatting import (
    format_chain,
    format_lookup,
    format_region,
    format_search,
    level_label,
)

__all__ = [
    "CodeLookupResult",
    "NameSearchResult",
    "RegionMatch",
    "RegionQueryEngine",
    "format_chain",
    "format_lookup",
    "format_region",
    "format_search",
    "level_label",
]
