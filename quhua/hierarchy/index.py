"""
Sorted code index used while linking the hierarchy.

Resolves a parent code to its node in O(log N) by binary search over
(code, node) pairs sorted by code.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable

from quhua.hierarchy.tree import RegionNode


class CodeIndex:
    """
    Sorted (code, node) array with binary-search lookup.

    Python compares ``str`` by code point, which orders the same way as a
    byte-wise comparison of the UTF-8 encodings. The sort is stable, so
    among equal codes the node that came first in the input comes first in
    the index and is the one ``find`` returns.
    """

    def __init__(self, nodes: Iterable[RegionNode]) -> None:
        pairs = sorted(((node.code, node) for node in nodes), key=lambda pair: pair[0])
        self._codes = [code for code, _ in pairs]
        self._nodes = [node for _, node in pairs]

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.find(code) is not None

    def find(self, code: str) -> RegionNode | None:
        """Return the first node with exactly this code, or None."""
        pos = bisect_left(self._codes, code)
        if pos < len(self._codes) and self._codes[pos] == code:
            return self._nodes[pos]
        return None

    def duplicate_codes(self) -> list[str]:
        """Codes that occur more than once, in sorted order."""
        duplicates: list[str] = []
        for previous, current in zip(self._codes, self._codes[1:]):
            if previous == current and (not duplicates or duplicates[-1] != current):
                duplicates.append(current)
        return duplicates
