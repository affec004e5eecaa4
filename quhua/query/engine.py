"""
Query engine over a built region tree.

Two lookups are supported:
- exact match by code
- case-sensitive substring match by name, capped at a configurable limit

Every hit is annotated with its ancestor chain. Neither lookup raises for a
missing region; "not found" is an ordinary result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from quhua.config import QueryConfig
from quhua.hierarchy.tree import AncestorEntry, RegionNode, RegionTree, ancestor_chain


@dataclass
class RegionMatch:
    """A region together with its ancestor chain (child-to-root)."""

    node: RegionNode
    ancestors: list[AncestorEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            **self.node.record.to_dict(),
            "ancestors": [
                {"level": entry.level, "name": entry.name} for entry in self.ancestors
            ],
        }


@dataclass
class CodeLookupResult:
    """Outcome of a code lookup.

    Attributes:
        code: The code that was looked up.
        found: Whether a reachable region has exactly this code.
        node: The region, None when not found.
        ancestors: The region's ancestor chain, empty when not found.
    """

    code: str
    found: bool
    node: RegionNode | None = None
    ancestors: list[AncestorEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "code": self.code,
            "found": self.found,
            "region": RegionMatch(self.node, self.ancestors).to_dict() if self.node else None,
        }


@dataclass
class NameSearchResult:
    """Outcome of a name search.

    Attributes:
        pattern: The substring that was searched for.
        limit: Result cap in effect.
        matches: Hits in traversal-encounter order, at most ``limit``.
        truncated: True when more matching regions exist than were returned.
        total_seen: Matching regions encountered before the traversal
            stopped. A lower bound of the true total when truncated, unless
            the engine was configured to count all matches.
    """

    pattern: str
    limit: int
    matches: list[RegionMatch] = field(default_factory=list)
    truncated: bool = False
    total_seen: int = 0

    @property
    def nodes(self) -> list[RegionNode]:
        return [match.node for match in self.matches]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "pattern": self.pattern,
            "limit": self.limit,
            "truncated": self.truncated,
            "total_seen": self.total_seen,
            "matches": [match.to_dict() for match in self.matches],
        }


class RegionQueryEngine:
    """
    Answers code and name queries against a built RegionTree.

    Code lookups use the tree's retained code map when it has one (O(1))
    and fall back to a linear scan in input order otherwise (O(N)). Both
    resolve a duplicated code to its first reachable record.
    Name searches always scan depth-first, pre-order. The tree is never
    modified, so repeated queries return identical results.

    Args:
        tree: A fully built tree.
        config: Search limits. Uses defaults when None.
    """

    def __init__(self, tree: RegionTree, config: QueryConfig | None = None) -> None:
        self.tree = tree
        self.config = config or QueryConfig()

    def find_node(self, code: str) -> RegionNode | None:
        """Return the reachable region with exactly this code, or None."""
        if self.tree.code_map is not None:
            return self.tree.code_map.get(code)
        return self.tree.find_first(code)

    def find_by_code(self, code: str) -> CodeLookupResult:
        """Look up a region by exact code.

        Args:
            code: Region code to look up.

        Returns:
            CodeLookupResult; ``found`` is False for unknown or orphaned codes.
        """
        node = self.find_node(code)
        if node is None:
            return CodeLookupResult(code=code, found=False)
        return CodeLookupResult(code=code, found=True, node=node, ancestors=ancestor_chain(node))

    def find_by_name(self, pattern: str, limit: int | None = None) -> NameSearchResult:
        """Find regions whose name contains ``pattern``.

        Args:
            pattern: Case-sensitive substring to look for.
            limit: Maximum matches to return. Defaults to the configured limit.

        Returns:
            NameSearchResult with matches in depth-first encounter order.

        Raises:
            ValueError: If limit is less than 1.
        """
        cap = self.config.name_search_limit if limit is None else limit
        if cap < 1:
            raise ValueError("limit must be at least 1")

        result = NameSearchResult(pattern=pattern, limit=cap)
        for node in self.tree.iter_regions():
            if pattern not in node.name:
                continue
            result.total_seen += 1
            if len(result.matches) < cap:
                result.matches.append(RegionMatch(node, ancestor_chain(node)))
                continue
            result.truncated = True
            if not self.config.count_all_matches:
                break
        return result
