"""
Region tree data structures.

The hierarchy is built once from flat records and is read-only afterwards,
so a built tree can be shared between threads without locking.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from quhua.core.region import ROOT_LEVEL, DivisionRecord
from quhua.errors import HierarchyCycleError


class AncestorEntry(NamedTuple):
    """One forebear in an ancestor chain."""

    level: int
    name: str


@dataclass(eq=False)
class RegionNode:
    """
    A node in the region hierarchy.

    Wraps one DivisionRecord. Children keep input order; ``parent`` is a
    back-reference that is assigned once, when the node is attached.
    """

    record: DivisionRecord
    children: list[RegionNode] = field(default_factory=list)
    parent: RegionNode | None = None

    def add_child(self, child: RegionNode) -> None:
        """Attach a child node to this region.

        Raises:
            ValueError: If the child is already attached somewhere.
        """
        if child.parent is not None:
            raise ValueError(
                f"Region {child.code} is already attached to {child.parent.code}"
            )
        child.parent = self
        self.children.append(child)

    @property
    def code(self) -> str:
        return self.record.code

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def level(self) -> int:
        return self.record.level

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def depth(self) -> int:
        """Number of parent links between this node and the top of its tree."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    @property
    def descendant_count(self) -> int:
        """Count all descendants (children, grandchildren, etc.)."""
        return sum(1 for _ in self.iter_preorder()) - 1

    @property
    def hierarchy_path(self) -> str:
        """
        Names from the top-level division down to this node.

        Example: "北京市 > 市辖区 > 东城区"
        """
        parts = [self.name]
        parts.extend(entry.name for entry in ancestor_chain(self))
        if self.level == ROOT_LEVEL:
            return ""
        return " > ".join(reversed(parts))

    def iter_preorder(self) -> Iterator[RegionNode]:
        """Yield this node and its descendants, depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_all_descendants(self) -> list[RegionNode]:
        """Get all descendants as a flat list (DFS order)."""
        nodes = self.iter_preorder()
        next(nodes)
        return list(nodes)

    def release(self) -> None:
        """Detach every node below this one, parent to child."""
        stack = [self]
        while stack:
            node = stack.pop()
            stack.extend(node.children)
            for child in node.children:
                child.parent = None
            node.children = []

    def to_dict(self, include_children: bool = False) -> dict[str, Any]:
        """
        Convert to dictionary for JSON export.

        Args:
            include_children: If True, nest every descendant under "children"
        """
        result = self._flat_dict()
        if not include_children:
            return result

        stack = [(self, result)]
        while stack:
            node, data = stack.pop()
            data["children"] = []
            for child in node.children:
                child_data = child._flat_dict()
                data["children"].append(child_data)
                stack.append((child, child_data))
        return result

    def _flat_dict(self) -> dict[str, Any]:
        result = self.record.to_dict()
        result["hierarchy_path"] = self.hierarchy_path
        result["child_count"] = len(self.children)
        return result

    def __repr__(self) -> str:
        return (
            f"<RegionNode {self.code} '{self.name}' "
            f"level={self.level} children={len(self.children)}>"
        )


def ancestor_chain(node: RegionNode) -> list[AncestorEntry]:
    """Collect the forebears of ``node`` in child-to-root order.

    The walk starts at the node's parent and stops before the synthetic
    root (a node without a parent, or one at the root level). The node
    itself is never part of its chain.

    Raises:
        HierarchyCycleError: If the parent chain revisits a node.
    """
    chain: list[AncestorEntry] = []
    seen = {id(node)}
    current = node.parent
    while current is not None and current.parent is not None and current.level != ROOT_LEVEL:
        if id(current) in seen:
            raise HierarchyCycleError(node.code)
        seen.add(id(current))
        chain.append(AncestorEntry(current.level, current.name))
        current = current.parent
    return chain


@dataclass
class RegionTree:
    """
    A built region hierarchy.

    Wraps the national root and keeps the build's data-quality findings.

    Attributes:
        root: National root; owns every top-level region.
        nodes: Every record's node in input order, reachable or not.
        orphans: Nodes whose parent code resolved to nothing (unreachable).
        duplicate_codes: Codes that occurred more than once in the input.
        code_map: Reachable code -> node map, None when not retained.
        synthetic_root: False when the root is a national record taken
            from the input, which then counts as a region itself.
        metadata: Free-form build information.
    """

    root: RegionNode
    nodes: list[RegionNode] = field(default_factory=list)
    orphans: list[RegionNode] = field(default_factory=list)
    duplicate_codes: list[str] = field(default_factory=list)
    code_map: dict[str, RegionNode] | None = None
    synthetic_root: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_nodes(self) -> int:
        """Count reachable nodes including the synthetic root."""
        return sum(1 for _ in self.root.iter_preorder())

    @property
    def orphan_count(self) -> int:
        return len(self.orphans)

    @property
    def max_depth(self) -> int:
        """Get maximum depth of the tree (root = 0)."""
        deepest = 0
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            deepest = max(deepest, depth)
            stack.extend((child, depth + 1) for child in node.children)
        return deepest

    @property
    def leaf_count(self) -> int:
        return sum(1 for node in self.iter_regions() if node.is_leaf)

    def iter_regions(self) -> Iterator[RegionNode]:
        """Reachable regions in pre-order; a synthetic root is skipped."""
        nodes = self.root.iter_preorder()
        if self.synthetic_root:
            next(nodes)
        yield from nodes

    def is_reachable(self, node: RegionNode) -> bool:
        """True when following parent links from ``node`` ends at the root."""
        seen: set[int] = set()
        current: RegionNode | None = node
        while current is not None and id(current) not in seen:
            if current is self.root:
                return True
            seen.add(id(current))
            current = current.parent
        return False

    def find_first(self, code: str) -> RegionNode | None:
        """First reachable node in input order with exactly this code."""
        for node in self.nodes:
            if node.code == code and self.is_reachable(node):
                return node
        return None

    def get_all_nodes(self, include_root: bool = False) -> list[RegionNode]:
        """Get all reachable regions as a flat list (DFS order)."""
        if include_root:
            return list(self.root.iter_preorder())
        return list(self.iter_regions())

    def get_nodes_at_level(self, level: int) -> list[RegionNode]:
        """Get all reachable regions at a specific administrative level."""
        return [node for node in self.get_all_nodes() if node.level == level]

    def get_statistics(self) -> dict[str, Any]:
        """Get tree statistics for diagnostics."""
        return {
            "total_nodes": self.total_nodes,
            "top_level_regions": len(self.root.children),
            "leaf_nodes": self.leaf_count,
            "max_depth": self.max_depth,
            "orphan_count": self.orphan_count,
            "duplicate_codes": list(self.duplicate_codes),
            "index_retained": self.code_map is not None,
            "level_distribution": self._get_level_distribution(),
        }

    def _get_level_distribution(self) -> dict[int, int]:
        """Get count of reachable regions at each level."""
        return dict(Counter(node.level for node in self.get_all_nodes()))

    def release(self) -> None:
        """Tear the tree down; the tree must not be queried afterwards.

        Detaches every node, including orphans and nodes stuck in a parent
        cycle that never reaches the root.
        """
        self.root.release()
        for orphan in self.orphans:
            orphan.release()
        for node in self.nodes:
            node.parent = None
            node.children = []
        self.nodes = []
        self.orphans = []
        if self.code_map is not None:
            self.code_map = {}

    def to_dict(self) -> dict[str, Any]:
        """Convert entire tree to dictionary."""
        return {
            "metadata": self.metadata,
            "statistics": self.get_statistics(),
            "root": self.root.to_dict(include_children=True),
        }

    def __repr__(self) -> str:
        return (
            f"<RegionTree nodes={self.total_nodes} "
            f"orphans={self.orphan_count} "
            f"depth={self.max_depth}>"
        )
